from .encoder_port import EncoderPort
from .rate_limiter_port import PermitPort, RateLimiterPort
from .transport_port import TransportPort

__all__ = ["EncoderPort", "PermitPort", "RateLimiterPort", "TransportPort"]
