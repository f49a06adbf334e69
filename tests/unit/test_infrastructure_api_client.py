"""Tests for stripro/infrastructure/api_client/client.py.

Covers the request lifecycle end to end against a scripted transport:
- Cache hit/expiry and mutation-driven invalidation
- Rate limit trip and recovery
- Retry with backoff, no retry on 4xx
- Interceptor ordering and failure handling
- Cancellation, auth headers, envelope validation, logging
"""

import asyncio

import pytest

from stripro.core.enums import ErrorKind, HttpMethod, RequestKind
from stripro.core.errors import ApiError
from stripro.domain.value_objects import (
    CacheConfig,
    RateLimitConfig,
    RequestConfig,
    RequestOptions,
)
from stripro.schemas import Envelope
from tests.conftest import ok, status

CACHE_5S = RequestOptions(cache=CacheConfig(ttl_seconds=5))


# =============================================================================
# Caching
# =============================================================================


@pytest.mark.unit
class TestCaching:
    async def test_cache_hit_within_ttl(self, make_client, transport, clock):
        """Two gets within the TTL dispatch once and return equal data."""
        client = make_client()
        transport.queue(ok([{"id": "u1"}]))

        first = await client.get("/users", CACHE_5S)
        clock.advance(2_000)
        second = await client.get("/users", CACHE_5S)

        assert transport.calls == 1
        assert first == second == [{"id": "u1"}]

    async def test_cache_expiry(self, make_client, transport, clock):
        """A get after the TTL elapsed dispatches again."""
        client = make_client()
        transport.queue(ok(["old"]), ok(["new"]))

        await client.get("/users", CACHE_5S)
        clock.advance(6_000)
        result = await client.get("/users", CACHE_5S)

        assert transport.calls == 2
        assert result == ["new"]

    async def test_get_without_cache_config_always_dispatches(
        self, make_client, transport
    ):
        client = make_client()
        transport.queue(ok(1), ok(2))

        await client.get("/users")
        await client.get("/users")

        assert transport.calls == 2
        assert len(client.cache) == 0

    async def test_mutation_invalidates_matching_resources(
        self, make_client, transport
    ):
        """A client mutation drops "clients" entries and keeps "transactions"."""
        client = make_client()
        transport.queue(ok(["c"]), ok(["t"]), ok({"id": "c2"}))

        await client.get("/clients", RequestOptions(cache=CacheConfig(ttl_seconds=60, tags={"clients"})))
        await client.get(
            "/transactions",
            RequestOptions(cache=CacheConfig(ttl_seconds=60, tags={"transactions"})),
        )
        await client.post("/clients", {"name": "Acme"}, RequestOptions(invalidates="createClient"))

        assert "/clients" not in client.cache
        assert "/transactions" in client.cache

    async def test_unrelated_name_containing_stem_also_invalidates(
        self, make_client, transport
    ):
        """Substring matching is coarse: CreateClientNote clears "clients"."""
        client = make_client()
        transport.queue(ok(["c"]), ok({}))

        await client.get("/clients", RequestOptions(cache=CacheConfig(ttl_seconds=60)))
        await client.post("/notes", {}, RequestOptions(invalidates="CreateClientNote"))

        assert "/clients" not in client.cache

    async def test_mutation_defaults_invalidation_name_to_endpoint(
        self, make_client, transport
    ):
        client = make_client()
        transport.queue(ok(["c"]), ok({}))

        await client.get("/clients", RequestOptions(cache=CacheConfig(ttl_seconds=60)))
        await client.delete("/clients/42")

        assert "/clients" not in client.cache

    async def test_failed_mutation_does_not_invalidate(self, make_client, transport):
        client = make_client()
        transport.queue(ok(["c"]), status(400))

        await client.get("/clients", RequestOptions(cache=CacheConfig(ttl_seconds=60)))
        with pytest.raises(ApiError):
            await client.put("/clients/42", {})

        assert "/clients" in client.cache

    async def test_read_classed_post_is_cached_by_body(self, make_client, transport):
        client = make_client()
        transport.queue(ok("a"), ok("b"))
        options = RequestOptions(cache=CacheConfig(ttl_seconds=60))

        await client.request(HttpMethod.POST, "/search", {"q": "x", "n": 1}, options, kind=RequestKind.READ)
        await client.request(HttpMethod.POST, "/search", {"n": 1, "q": "x"}, options, kind=RequestKind.READ)
        third = await client.request(HttpMethod.POST, "/search", {"q": "y"}, options, kind=RequestKind.READ)

        assert transport.calls == 2
        assert third == "b"

    async def test_post_is_never_served_from_cache(self, make_client, transport):
        client = make_client()
        transport.queue(ok(1), ok(2))
        options = RequestOptions(cache=CacheConfig(ttl_seconds=60))

        await client.post("/clients", {}, options)
        await client.post("/clients", {}, options)

        assert transport.calls == 2

    async def test_cache_stats_and_clear(self, make_client, transport):
        client = make_client()
        transport.queue(ok(1))

        await client.get("/users", CACHE_5S)
        await client.get("/users", CACHE_5S)

        stats = client.get_cache_stats()
        assert (stats.size, stats.hits, stats.misses) == (1, 1, 1)

        client.clear_cache()
        assert client.get_cache_stats().size == 0
        assert client.get_cache_stats().hits == 0

    async def test_invalidate_cache_by_name(self, make_client, transport):
        client = make_client()
        transport.queue(ok(1))
        await client.get("/users", CACHE_5S)

        assert client.invalidate_cache("updateUser") == ["/users"]


# =============================================================================
# Rate limiting
# =============================================================================


@pytest.mark.unit
class TestRateLimiting:
    async def test_trip_and_recovery(self, make_client, transport, clock):
        """2 per second: third call in the window fails, a later one succeeds."""
        client = make_client()
        transport.fallback = ok("r")
        options = RequestOptions(rate_limit=RateLimitConfig(max_requests=2, window_ms=1000))

        await client.get("/reports", options)
        clock.advance(100)
        await client.get("/reports", options)
        clock.advance(100)

        with pytest.raises(ApiError) as exc_info:
            await client.get("/reports", options)

        error = exc_info.value
        assert error.code == "RATE_LIMITED"
        assert error.kind is ErrorKind.RATE_LIMITED
        assert error.details["retryAfterMs"] == 800
        assert transport.calls == 2

        clock.advance(1_000)
        assert await client.get("/reports", options) == "r"
        assert transport.calls == 3

    async def test_rate_limited_call_is_not_retried(self, make_client, transport, sleep):
        client = make_client()
        transport.fallback = ok("r")
        options = RequestOptions(
            retries=3, rate_limit=RateLimitConfig(max_requests=1, window_ms=1000)
        )

        await client.get("/reports", options)
        with pytest.raises(ApiError):
            await client.get("/reports", options)

        assert transport.calls == 1
        assert sleep.delays == []

    async def test_cache_hit_does_not_consume_rate_limit(self, make_client, transport):
        client = make_client()
        transport.fallback = ok("r")
        options = RequestOptions(
            cache=CacheConfig(ttl_seconds=60),
            rate_limit=RateLimitConfig(max_requests=1, window_ms=1000),
        )

        await client.get("/reports", options)
        await client.get("/reports", options)

        assert client.rate_limiter.peek("/reports").count == 1

    async def test_reset_rate_limits(self, make_client, transport):
        client = make_client()
        transport.fallback = ok("r")
        options = RequestOptions(rate_limit=RateLimitConfig(max_requests=1, window_ms=1000))

        await client.get("/reports", options)
        client.reset_rate_limits()

        assert await client.get("/reports", options) == "r"


# =============================================================================
# Retry and error normalization
# =============================================================================


@pytest.mark.unit
class TestRetryAndErrors:
    async def test_retry_until_success(self, make_client, transport, sleep):
        """500, 500, 200 with retries=3: three attempts, waits of 1 s and 2 s."""
        client = make_client()
        transport.queue(status(500), status(500), ok({"ok": True}))

        result = await client.get("/reports", RequestOptions(retries=3))

        assert result == {"ok": True}
        assert transport.calls == 3
        assert sleep.delays == [1.0, 2.0]

    async def test_no_retry_on_not_found(self, make_client, transport, sleep):
        client = make_client()
        transport.queue(status(404, {"message": "Client not found"}))

        with pytest.raises(ApiError) as exc_info:
            await client.get("/clients/missing", RequestOptions(retries=3))

        assert exc_info.value.code == "404"
        assert exc_info.value.message == "Client not found"
        assert exc_info.value.path == "http://api.test/clients/missing"
        assert transport.calls == 1
        assert sleep.delays == []

    async def test_exhausted_server_errors_raise_http_error(self, make_client, transport):
        client = make_client()
        transport.queue(status(503), status(503))

        with pytest.raises(ApiError) as exc_info:
            await client.get("/reports", RequestOptions(retries=1))

        assert exc_info.value.code == "503"
        assert exc_info.value.kind is ErrorKind.SERVER

    async def test_transport_failure_after_retries(self, make_client, transport):
        client = make_client()

        with pytest.raises(ApiError) as exc_info:
            await client.get("/reports", RequestOptions(retries=2))

        assert exc_info.value.code == "NETWORK_ERROR"
        assert exc_info.value.kind is ErrorKind.TRANSPORT
        assert transport.calls == 3

    async def test_default_retries_come_from_settings(self, make_client, transport, settings):
        client = make_client(settings=settings.model_copy(update={"request_retries": 1}))
        transport.queue(status(500), ok("x"))

        assert await client.get("/reports") == "x"
        assert transport.calls == 2

    async def test_body_that_is_not_an_envelope(self, make_client, transport):
        client = make_client()
        transport.queue(status(200, ["not", "an", "envelope"]))

        with pytest.raises(ApiError) as exc_info:
            await client.get("/reports")

        assert exc_info.value.code == "INVALID_RESPONSE"

    async def test_envelope_without_data(self, make_client, transport):
        client = make_client()
        transport.queue(status(200, {"success": True}))

        with pytest.raises(ApiError) as exc_info:
            await client.get("/reports")

        assert exc_info.value.code == "INVALID_RESPONSE"
        assert exc_info.value.details["errors"][0]["loc"] == ["data"]

    async def test_invalid_options_raise_value_error(self, make_client):
        client = make_client()
        with pytest.raises(ValueError):
            await client.get("/reports", RequestOptions(retries=-1))


# =============================================================================
# Interceptors
# =============================================================================


@pytest.mark.unit
class TestInterceptors:
    async def test_request_interceptors_run_in_registration_order(
        self, make_client, transport
    ):
        client = make_client()
        transport.queue(ok(None))

        def append(value: str):
            def interceptor(config: RequestConfig) -> RequestConfig:
                current = config.headers.get("X")
                return config.with_header("X", value if current is None else f"{current}-{value}")

            return interceptor

        client.add_request_interceptor(append("1"))
        client.add_request_interceptor(append("2"))

        await client.get("/anything")

        assert transport.requests[0].headers["X"] == "1-2"

    async def test_response_interceptor_output_is_cached(self, make_client, transport):
        client = make_client()
        transport.queue(ok([1, 2]))
        client.add_response_interceptor(lambda env: env.with_data(sum(env.data)))

        await client.get("/totals", CACHE_5S)

        assert await client.get("/totals", CACHE_5S) == 3

    async def test_response_interceptor_failure_skips_cache_write(
        self, make_client, transport
    ):
        client = make_client()
        transport.queue(ok([1]))

        def reject(envelope: Envelope) -> Envelope:
            raise ApiError(code="GRAPHQL_ERROR", message="bad", kind=ErrorKind.CLIENT)

        client.add_response_interceptor(reject)

        with pytest.raises(ApiError) as exc_info:
            await client.get("/totals", CACHE_5S)

        assert exc_info.value.code == "GRAPHQL_ERROR"
        assert len(client.cache) == 0

    async def test_request_interceptor_failure_runs_error_chain(
        self, make_client, transport
    ):
        client = make_client()
        seen: list[str] = []
        client.add_request_interceptor(lambda config: 1 / 0)
        client.add_error_interceptor(lambda e: seen.append(e.code) or e)

        with pytest.raises(ApiError) as exc_info:
            await client.get("/anything")

        assert exc_info.value.code == "INTERCEPTOR_FAILED"
        assert exc_info.value.path == "http://api.test/anything"
        assert seen == ["INTERCEPTOR_FAILED"]
        assert transport.calls == 0

    async def test_error_interceptor_can_enrich_but_not_reclassify(
        self, make_client, transport
    ):
        client = make_client()
        transport.queue(status(404))
        client.add_error_interceptor(
            lambda e: e.with_updates(message="Nothing here", kind=ErrorKind.SERVER)
        )

        with pytest.raises(ApiError) as exc_info:
            await client.get("/clients/1")

        assert exc_info.value.message == "Nothing here"
        assert exc_info.value.kind is ErrorKind.CLIENT

    async def test_failing_error_interceptor_replaces_error(
        self, make_client, transport
    ):
        client = make_client()
        transport.queue(status(404))

        def broken(error: ApiError) -> ApiError:
            raise RuntimeError("bug")

        client.add_error_interceptor(broken)

        with pytest.raises(ApiError) as exc_info:
            await client.get("/clients/1")

        assert exc_info.value.code == "INTERCEPTOR_FAILED"
        assert exc_info.value.__cause__ is not None

    async def test_removed_interceptor_no_longer_runs(self, make_client, transport):
        client = make_client()
        transport.queue(ok(None))

        def tag(config: RequestConfig) -> RequestConfig:
            return config.with_header("X-Tag", "1")

        client.add_request_interceptor(tag)
        assert client.remove_request_interceptor(tag) is True

        await client.get("/anything")

        assert "X-Tag" not in transport.requests[0].headers


# =============================================================================
# Cancellation
# =============================================================================


@pytest.mark.unit
class TestCancellation:
    async def test_cancelled_before_dispatch(self, make_client, transport):
        client = make_client()
        token = client.create_abort_controller()
        token.cancel("user left")
        options = RequestOptions(
            cancel_token=token,
            rate_limit=RateLimitConfig(max_requests=1, window_ms=1000),
        )

        with pytest.raises(ApiError) as exc_info:
            await client.get("/reports", options)

        assert exc_info.value.code == "CANCELLED"
        assert exc_info.value.kind is ErrorKind.CANCELLED
        assert "user left" in exc_info.value.message
        assert transport.calls == 0
        assert client.rate_limiter.peek("/reports") is None

    async def test_cancelled_in_flight_skips_cache_write(self, make_client, transport):
        client = make_client()
        token = client.create_abort_controller()

        def respond_then_cancel(request):
            token.cancel()
            return ok("late")

        transport.queue(respond_then_cancel)
        options = RequestOptions(cancel_token=token, cache=CacheConfig(ttl_seconds=60))

        with pytest.raises(ApiError) as exc_info:
            await client.get("/reports", options)

        assert exc_info.value.code == "CANCELLED"
        assert len(client.cache) == 0

    async def test_cancel_while_request_in_flight(self, make_client, transport):
        """A hung transport call is abandoned as soon as the token is cancelled."""
        client = make_client()
        token = client.create_abort_controller()
        started = asyncio.Event()
        never = asyncio.Event()

        async def hang(request):
            started.set()
            await never.wait()

        transport.queue(hang)
        task = asyncio.create_task(
            client.get("/reports", RequestOptions(cancel_token=token, retries=3))
        )
        await started.wait()
        token.cancel("navigated away")

        with pytest.raises(ApiError) as exc_info:
            await asyncio.wait_for(task, timeout=1)

        assert exc_info.value.code == "CANCELLED"
        assert exc_info.value.message == "Request was cancelled: navigated away"
        assert transport.calls == 1

    async def test_cancel_during_backoff(self, make_client, transport):
        started = asyncio.Event()

        async def slow_sleep(seconds: float) -> None:
            started.set()
            await asyncio.sleep(seconds)

        client = make_client(sleep=slow_sleep)
        token = client.create_abort_controller()
        transport.queue(status(500), ok("never"))

        task = asyncio.create_task(
            client.get("/reports", RequestOptions(retries=3, cancel_token=token))
        )
        await started.wait()
        token.cancel()

        with pytest.raises(ApiError) as exc_info:
            await asyncio.wait_for(task, timeout=1)

        assert exc_info.value.code == "CANCELLED"
        assert exc_info.value.details == {"attempts": 1}
        assert transport.calls == 1


# =============================================================================
# Headers, auth and lifecycle
# =============================================================================


@pytest.mark.unit
class TestHeadersAndLifecycle:
    async def test_default_json_headers_and_body(self, make_client, transport):
        client = make_client()
        transport.queue(ok({}))

        await client.post("/clients", {"name": "Acme"})

        request = transport.requests[0]
        assert request.method is HttpMethod.POST
        assert request.url == "http://api.test/clients"
        assert request.json == {"name": "Acme"}
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["Accept"] == "application/json"
        assert request.timeout_ms == 5_000

    async def test_auth_token_header(self, make_client, transport):
        client = make_client()
        transport.queue(ok(1), ok(2))

        client.set_auth_token("tok")
        await client.get("/users/me")
        client.clear_auth_token()
        await client.get("/users/me")

        assert transport.requests[0].headers["Authorization"] == "Bearer tok"
        assert "Authorization" not in transport.requests[1].headers
        assert client.auth_token is None

    async def test_call_site_headers_override_defaults(self, make_client, transport):
        client = make_client(default_headers={"X-Client": "dash"})
        transport.queue(ok(1))

        await client.get("/x", RequestOptions(headers={"Accept": "text/csv"}))

        headers = transport.requests[0].headers
        assert headers["Accept"] == "text/csv"
        assert headers["X-Client"] == "dash"

    async def test_string_methods_are_accepted(self, make_client, transport):
        client = make_client()
        transport.queue(ok(1))

        assert await client.request("patch", "/clients/1", {"a": 1}) == 1
        assert transport.requests[0].method is HttpMethod.PATCH

    async def test_context_manager_does_not_close_injected_transport(
        self, make_client, transport
    ):
        async with make_client() as client:
            assert client.base_url == "http://api.test"

        assert transport.closed is False

    def test_base_url_trailing_slash_is_stripped(self, make_client):
        assert make_client(base_url="http://api.test/").base_url == "http://api.test"


# =============================================================================
# Logging
# =============================================================================


@pytest.mark.unit
class TestTrafficLogging:
    async def test_logs_request_response_and_cache_hit(self, make_client, transport, logger):
        client = make_client()
        client.set_auth_token("secret-token")
        transport.queue(ok([1]))

        await client.get("/users", CACHE_5S)
        await client.get("/users", CACHE_5S)

        events = logger.events()
        assert events.count("api_request") == 2
        assert events.count("api_response") == 1
        assert "api_cache_hit" in events
        [first_request, _] = logger.find("api_request")
        assert "Authorization" in first_request.context["headers"]
        assert all("secret-token" not in str(r.context) for r in logger.records)

    async def test_logs_errors(self, make_client, transport, logger):
        client = make_client()
        transport.queue(status(500))

        with pytest.raises(ApiError):
            await client.get("/reports")

        [record] = logger.find("api_error")
        assert record.level == "error"
        assert record.context["code"] == "500"

    async def test_client_errors_log_as_warning(self, make_client, transport, logger):
        client = make_client()
        transport.queue(status(404))

        with pytest.raises(ApiError):
            await client.get("/reports")

        [record] = logger.find("api_error")
        assert record.level == "warning"

    async def test_traffic_logging_can_be_disabled(self, make_client, transport, logger):
        client = make_client(log_traffic=False)
        transport.queue(ok(1))

        await client.get("/users")

        assert "api_request" not in logger.events()
