from __future__ import annotations

import logging

from dependency_injector import containers, providers

from ..core.domain.models import RateLimitConfig
from ..core.services.throttled_invoker import ThrottledInvoker
from ..infra.http_client import HttpTransport
from ..infra.json_encoder import JsonEncoder
from ..infra.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


def rate_limiter_resource(time_interval_seconds, request_limit, shutdown_grace_seconds):
	"""Own one FixedWindowRateLimiter per container; its timer stops on resource shutdown."""
	config = RateLimitConfig(window_seconds=time_interval_seconds, max_requests=request_limit)
	limiter = FixedWindowRateLimiter(config, shutdown_grace_seconds=shutdown_grace_seconds)
	try:
		yield limiter
	finally:
		logger.debug("Shutting down rate limiter")
		limiter.shutdown()


def http_transport_resource(timeout_seconds, connect_timeout_seconds):
	logger.info("Initializing HTTP transport")
	with HttpTransport(timeout_seconds=timeout_seconds, connect_timeout_seconds=connect_timeout_seconds) as transport:
		yield transport
	logger.debug("HTTP transport closed")


class Container(containers.DeclarativeContainer):
	config = providers.Configuration()

	rate_limiter = providers.Resource(
		rate_limiter_resource,
		time_interval_seconds=config.time_interval_seconds,
		request_limit=config.request_limit,
		shutdown_grace_seconds=config.shutdown_grace_seconds,
	)

	transport = providers.Resource(
		http_transport_resource,
		timeout_seconds=config.timeout_seconds,
		connect_timeout_seconds=config.connect_timeout_seconds,
	)

	encoder = providers.Singleton(JsonEncoder)

	invoker = providers.Singleton(
		ThrottledInvoker,
		rate_limiter=rate_limiter,
		encoder=encoder,
		transport=transport,
		url=config.api_url,
		acquire_timeout_seconds=config.acquire_timeout_seconds,
	)
