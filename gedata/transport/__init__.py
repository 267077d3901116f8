from .http_utils import DeliveryResponse, encode_data, post_events, send_payload

__all__ = ["DeliveryResponse", "encode_data", "post_events", "send_payload"]
