import gzip
import json
import logging
from typing import NamedTuple, Optional

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
)

from gedata.constants import MAX_SEND_ATTEMPTS
from gedata.errors import NetworkError, ServerRejectedError, UnexpectedStatusError
from gedata.meta import get_meta_http_headers

logger = logging.getLogger(__name__)

# Application code the server uses for a malformed or missing "code" field
MALFORMED_RESPONSE_CODE = 1


class DeliveryResponse(NamedTuple):
    status_code: int
    code: int
    body: str = ""


def encode_data(data: bytes) -> bytes:
    return gzip.compress(data)


def extract_code(response: httpx.Response) -> Optional[int]:
    """
    Extract the application code from a 200 response body.

    Args:
        response: The HTTP response to extract the code from

    Returns:
        The integer code, or None if the body is not JSON or has no integral code
    """
    try:
        data = response.json()
    except (json.JSONDecodeError, ValueError):
        return None

    if not isinstance(data, dict):
        return None

    code = data.get("code")
    if isinstance(code, bool) or not isinstance(code, (int, float)):
        return None
    if isinstance(code, float) and not code.is_integer():
        return None
    return int(code)


def send_payload(
    client: httpx.Client,
    url: str,
    data: bytes,
    compress: bool,
    count: int,
    timeout: Optional[float] = None,
) -> DeliveryResponse:
    """
    POST one serialized payload to the collection endpoint.

    Args:
        client: HTTP client used for the request
        url: Collection endpoint
        data: JSON encoded payload
        compress: Gzip the body before sending
        count: Number of events in the payload, sent as a header
        timeout: Request timeout in seconds, the client default when None

    Returns:
        DeliveryResponse with the HTTP status and, for a 200, the application code

    Raises:
        NetworkError: If the request failed at the transport level
    """
    body = encode_data(data) if compress else data

    headers = {"Content-Type": "application/json"}
    headers.update(get_meta_http_headers(compress=compress, count=count))

    request_kwargs = {"content": body, "headers": headers}
    if timeout is not None:
        request_kwargs["timeout"] = timeout

    try:
        response = client.post(url, **request_kwargs)
    except httpx.TransportError as e:
        raise NetworkError(reason=str(e) or e.__class__.__name__) from e

    if response.status_code != httpx.codes.OK:
        return DeliveryResponse(status_code=response.status_code, code=-1)

    text = response.text
    logger.debug("Response body: %s", text)

    code = extract_code(response)
    if code is None:
        logger.warning("Malformed response body: %s", text)
        code = MALFORMED_RESPONSE_CODE

    return DeliveryResponse(status_code=response.status_code, code=code, body=text)


@retry(
    stop=stop_after_attempt(MAX_SEND_ATTEMPTS),
    reraise=True,
    retry=retry_if_exception_type(UnexpectedStatusError),
    before_sleep=before_sleep_log(logger, logging.WARNING),
)
def post_events(
    client: httpx.Client,
    url: str,
    data: bytes,
    compress: bool,
    count: int,
    timeout: Optional[float] = None,
) -> DeliveryResponse:
    """
    Send a payload, retrying unexpected statuses up to MAX_SEND_ATTEMPTS times.

    Transport errors and server rejections are not retried.

    Returns:
        DeliveryResponse of the accepted request

    Raises:
        NetworkError: On transport failure, first occurrence
        ServerRejectedError: On HTTP 200 with a non-zero code
        UnexpectedStatusError: When every attempt returned a non-200 status
    """
    response = send_payload(client, url, data, compress, count, timeout)

    if response.status_code == httpx.codes.OK:
        if response.code == 0:
            return response
        raise ServerRejectedError(code=response.code, body=response.body)

    raise UnexpectedStatusError(status_code=response.status_code)
