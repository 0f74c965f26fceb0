"""Vendor-agnostic chat-completions client.

Summary:
- ``generate``: blocking call returning the full generated text.
- ``iter_stream`` / ``generate_stream``: server-sent event streaming, one
  fragment per decoded data line, delivered in arrival order.
- ``test_connection``: connectivity probe for a provider profile.

Per call, the active provider is snapshotted from the settings source and
classified once; the resulting ``VendorClass`` drives the endpoint, body,
headers and decoders. The client keeps no mutable state between calls, so
concurrent calls need no locking.

Errors & Observability:
- Configuration problems raise ``ConfigurationError`` before any I/O.
- Non-2xx responses raise ``UpstreamError`` carrying status and raw body.
- Transport failures are normalized with ``classify_exception``.
- Cancellation raises ``CancelledError``; partial stream text is never
  returned as a success. Network waits happen on a ``ResponsePump`` worker,
  so a cancel from another thread does not wait for the server.
- Structured events (``chat.start``, ``stream.end``, ...) go to the injected
  ``ProviderLogger`` with the API key masked and bodies truncated.
"""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, NoReturn, Optional, Protocol, Tuple

import httpx

from ..base.cancellation import CancellationToken, CancelledError
from ..base.decoding import extract_response_text
from ..base.errors import (
    ConfigurationError,
    ProviderError,
    UpstreamError,
    classify_exception,
    code_for_status,
)
from ..base.http import get_httpx_client
from ..base.logging import LogContext, LogLevel, ProviderLogger, StdlibProviderLogger, get_logger, log_event
from ..base.models import AppSettings, GenerationDefaults, ProviderConfig
from ..base.payload import build_request_body
from ..base.streaming import StreamDecoder
from ..base.timeouts import build_httpx_timeout
from ..base.vendor import classify_vendor
from ..config.defaults import PROBE_PREVIEW_CHARS, PROBE_TIMEOUT_SECONDS, ZHIPU_DEFAULT_MODEL
from .helpers import ClientHelpersMixin, FixedSettingsSource, PreparedCall, build_headers, truncate
from .response_pump import END, ERROR, Item, ResponsePump
from .text_cleanup import clean_generated_text

_SOURCE = "CompletionClient"
_PROBE_PROMPT = "hello"
_PROBE_MAX_TOKENS = 10


class SettingsSource(Protocol):
    """Anything that can produce the current ``AppSettings`` snapshot."""

    def load(self) -> AppSettings: ...


@dataclass(frozen=True)
class ConnectionProbe:
    """Outcome of :meth:`CompletionClient.test_connection`.

    Attributes:
        ok: ``True`` for a 2xx answer.
        status_code: HTTP status returned by the endpoint.
        url: URL that was probed.
        body_preview: First 200 characters of the response body.
    """

    ok: bool
    status_code: int
    url: str
    body_preview: str


class CompletionClient(ClientHelpersMixin):
    """Send prompts to the active provider and return generated text.

    Parameters:
        store: Settings source, normally a ``ConfigStore``. ``load()`` is
            called once per operation.
        logger: Logging collaborator; defaults to a stdlib-backed logger on
            ``textgen.client``.
        http_client: Optional ``httpx.Client`` (e.g. one built on
            ``httpx.MockTransport``); defaults to the shared pool.
        normalize_text: When ``True``, cosmetic Markdown is removed from the
            final returned text (never from streamed fragments).
    """

    def __init__(
        self,
        store: SettingsSource,
        *,
        logger: Optional[ProviderLogger] = None,
        http_client: Optional[httpx.Client] = None,
        normalize_text: bool = False,
    ) -> None:
        self._store = store
        self._logger: ProviderLogger = logger or StdlibProviderLogger(get_logger("client"))
        self._http_client = http_client
        self._normalize_text = normalize_text

    @classmethod
    def for_provider(
        cls,
        provider: ProviderConfig,
        defaults: Optional[GenerationDefaults] = None,
        *,
        api_base_override: Optional[str] = None,
        logger: Optional[ProviderLogger] = None,
        http_client: Optional[httpx.Client] = None,
        normalize_text: bool = False,
    ) -> "CompletionClient":
        """Build a client bound to one fixed provider snapshot (no store)."""
        settings = AppSettings(
            api_base_override=api_base_override,
            selected_provider_name=provider.name,
            generation_defaults=defaults or GenerationDefaults(),
            providers=[provider],
        )
        return cls(
            FixedSettingsSource(settings),
            logger=logger,
            http_client=http_client,
            normalize_text=normalize_text,
        )

    # ---- Blocking ----
    def generate(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> str:
        """Perform a non-streaming completion.

        Parameters:
            prompt: User prompt text.
            temperature: Sampling temperature; ``None`` uses the generation
                defaults. Clamped to ``[0, 2]``.
            max_tokens: Completion limit; ``None`` uses the generation
                defaults, ``<= 0`` means provider default.
            cancel: Optional cancellation token.

        Returns:
            The generated text, or ``""`` when the response carried no
            extractable text.

        Raises:
            ConfigurationError: invalid provider configuration (no I/O done).
            UpstreamError: non-2xx status.
            ProviderError: transport failure (timeout, connection, ...).
            CancelledError: ``cancel`` fired before or during the call.
        """
        call = self._prepare_call(prompt, temperature, max_tokens, stream=False)
        self._check_cancel(cancel, call, "chat")
        log_event(self._logger, "chat.start", call.ctx, source=_SOURCE, **self._request_summary(call))
        t0 = time.perf_counter()

        pump, unregister = self._start_pump(call, "chat", cancel, lines=False)
        try:
            _, resp = self._next_item(pump, call, cancel, "chat")
        finally:
            pump.stop()
            if unregister is not None:
                unregister()

        body = resp.text
        latency_ms = (time.perf_counter() - t0) * 1000.0
        self._log_response("chat.response", call, resp.status_code, body, latency_ms)
        if not resp.is_success:
            self._raise_upstream(call, resp.status_code, body)

        text = extract_response_text(body)
        if text is None:
            log_event(
                self._logger,
                "chat.no_text",
                call.ctx,
                level=LogLevel.WARN,
                source=_SOURCE,
                body=truncate(body),
            )
            text = ""
        return self._finalize_text(text)

    # ---- Streaming ----
    def iter_stream(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> Iterator[str]:
        """Yield non-empty text fragments of a streaming completion.

        The request is sent with ``stream=true`` and read line by line
        through a :class:`StreamDecoder`. Malformed lines are logged and
        skipped. Iteration ends at ``[DONE]`` or end of body.

        Raises:
            ConfigurationError, UpstreamError, ProviderError, CancelledError:
                as for :meth:`generate`. ``CancelledError`` may surface after
                some fragments were yielded.
        """
        call = self._prepare_call(prompt, temperature, max_tokens, stream=True)
        self._check_cancel(cancel, call, "stream")
        log_event(self._logger, "stream.start", call.ctx, source=_SOURCE, **self._request_summary(call))
        t0 = time.perf_counter()

        pump, unregister = self._start_pump(call, "stream", cancel, lines=True)
        decoder = StreamDecoder(self._logger, call.ctx)
        emitted = 0
        try:
            _, resp = self._next_item(pump, call, cancel, "stream")
            if not resp.is_success:
                body = self._response_text(resp)
                self._log_response("stream.response", call, resp.status_code, body, None)
                self._raise_upstream(call, resp.status_code, body)
            self._log_response("stream.response", call, resp.status_code, None, None)

            while not decoder.done:
                self._check_cancel(cancel, call, "stream")
                kind, line = self._next_item(pump, call, cancel, "stream")
                if kind == END:
                    break
                fragment = decoder.feed(line)
                if fragment:
                    emitted += 1
                    yield fragment
            self._check_cancel(cancel, call, "stream")
        finally:
            pump.stop()
            if unregister is not None:
                unregister()

        log_event(
            self._logger,
            "stream.end",
            call.ctx,
            source=_SOURCE,
            emitted=emitted,
            decode_errors=decoder.decode_errors,
            done=decoder.done,
            total_duration_ms=round((time.perf_counter() - t0) * 1000.0, 2),
        )

    def generate_stream(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        on_fragment: Optional[Callable[[str], Any]] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> str:
        """Stream a completion, forwarding fragments to ``on_fragment``.

        Parameters:
            on_fragment: Called once per non-empty fragment, in arrival order,
                on the calling thread.

        Returns:
            The accumulated text (normalized when ``normalize_text`` is set).

        Raises:
            CancelledError: the call was cancelled; the partial text is
                discarded.
        """
        parts = []
        with contextlib.closing(self.iter_stream(prompt, temperature, max_tokens, cancel)) as fragments:
            for fragment in fragments:
                parts.append(fragment)
                if on_fragment is not None:
                    on_fragment(fragment)
        return self._finalize_text("".join(parts))

    # ---- Connectivity probe ----
    def test_connection(
        self,
        provider: Optional[ProviderConfig] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> ConnectionProbe:
        """Probe a provider endpoint and report the HTTP status.

        The probed URL is the settings' ``api_base_override`` when set, else
        the provider's base URL, used literally. Zhipu-family providers get a
        minimal POST completion (10 tokens); everything else a plain GET.

        Parameters:
            provider: Profile to probe; defaults to the selected provider.
            cancel: Optional cancellation token checked before the request.

        Raises:
            ConfigurationError: no provider, or the URL is not absolute.
            ProviderError: transport failure.
            CancelledError: ``cancel`` fired before the request.
        """
        settings = self._store.load()
        provider = provider or self._active_provider(settings)
        url = (settings.api_base_override or provider.base_url or "").strip()
        self._validate_absolute_url(url, provider)

        vc = classify_vendor(provider.vendor, url, provider.default_model)
        ctx = LogContext(provider=provider.name, vendor=vc.vendor.value, model=provider.default_model, endpoint=url)
        call = PreparedCall(
            provider=provider,
            vendor_class=vc,
            model=provider.default_model,
            url=url,
            headers=build_headers(vc, provider.api_key),
            body={},
            timeout=build_httpx_timeout(PROBE_TIMEOUT_SECONDS),
            ctx=ctx,
        )
        self._check_cancel(cancel, call, "probe")
        client = self._client("probe")
        try:
            if vc.is_zhipu_family:
                body = build_request_body(
                    vc, provider.default_model or ZHIPU_DEFAULT_MODEL, _PROBE_PROMPT, 0.0, _PROBE_MAX_TOKENS
                )
                body.pop("temperature", None)
                resp = client.post(url, json=body, headers=call.headers, timeout=call.timeout)
            else:
                resp = client.get(url, headers=call.headers, timeout=call.timeout)
        except Exception as e:  # noqa: BLE001 - normalized below
            self._raise_failure(e, call, cancel, "probe")

        text = resp.text
        log_event(
            self._logger,
            "probe.response",
            ctx,
            source=_SOURCE,
            method="POST" if vc.is_zhipu_family else "GET",
            status=resp.status_code,
            body=truncate(text),
        )
        return ConnectionProbe(
            ok=resp.is_success,
            status_code=resp.status_code,
            url=url,
            body_preview=text[:PROBE_PREVIEW_CHARS],
        )

    # ---- Internal helpers ----
    def _client(self, purpose: str) -> httpx.Client:
        return self._http_client if self._http_client is not None else get_httpx_client(purpose)

    def _start_pump(
        self,
        call: PreparedCall,
        purpose: str,
        cancel: Optional[CancellationToken],
        *,
        lines: bool,
    ) -> Tuple[ResponsePump, Optional[Callable[[], None]]]:
        """Start the POST on a worker thread; a cancel wakes the consumer."""
        client = self._client(purpose)
        try:
            request = client.build_request("POST", call.url, json=call.body, headers=call.headers, timeout=call.timeout)
        except Exception as e:  # noqa: BLE001 - normalized below
            self._raise_failure(e, call, cancel, purpose)
        pump = ResponsePump(client, request, lines=lines)
        unregister = cancel.on_cancel(pump.interrupt) if cancel is not None else None
        return pump.start(), unregister

    def _next_item(
        self,
        pump: ResponsePump,
        call: PreparedCall,
        cancel: Optional[CancellationToken],
        phase: str,
    ) -> Item:
        """Wait for the pump's next item; cancellation and failures raise."""
        kind, value = pump.get()
        self._check_cancel(cancel, call, phase)
        if kind == ERROR:
            self._raise_failure(value, call, cancel, phase)
        return kind, value

    def _check_cancel(self, cancel: Optional[CancellationToken], call: PreparedCall, phase: str) -> None:
        if cancel is not None and cancel.cancelled:
            log_event(self._logger, f"{phase}.cancelled", call.ctx, source=_SOURCE, reason=cancel.reason)
            raise CancelledError(cancel.reason or "operation cancelled")

    def _raise_failure(
        self,
        err: Exception,
        call: PreparedCall,
        cancel: Optional[CancellationToken],
        phase: str,
    ) -> NoReturn:
        """Re-raise ``err`` as ``CancelledError`` or a normalized ``ProviderError``."""
        if cancel is not None and cancel.cancelled:
            log_event(self._logger, f"{phase}.cancelled", call.ctx, source=_SOURCE, reason=cancel.reason)
            raise CancelledError(cancel.reason or "operation cancelled") from err
        if isinstance(err, ProviderError):
            raise err
        code = classify_exception(err)
        log_event(
            self._logger,
            f"{phase}.error",
            call.ctx,
            level=LogLevel.ERROR,
            source=_SOURCE,
            error=str(err),
            error_type=type(err).__name__,
            error_code=code.value,
        )
        raise ProviderError(
            code=code,
            message=str(err) or type(err).__name__,
            provider=call.provider.name,
            model=call.model,
            raw=err,
        ) from err

    def _raise_upstream(self, call: PreparedCall, status_code: int, body: str) -> NoReturn:
        raise UpstreamError(
            status_code,
            body,
            provider=call.provider.name,
            model=call.model,
            code=code_for_status(status_code),
        )

    @staticmethod
    def _response_text(resp: httpx.Response) -> str:
        try:
            return resp.text
        except httpx.ResponseNotRead:
            return ""

    def _log_response(
        self,
        event: str,
        call: PreparedCall,
        status_code: int,
        body: Optional[str],
        latency_ms: Optional[float],
    ) -> None:
        fields: Dict[str, Any] = {"status": status_code}
        if body is not None:
            fields["body"] = truncate(body)
        if latency_ms is not None:
            fields["latency_ms"] = round(latency_ms, 2)
        level = LogLevel.INFO if 200 <= status_code < 300 else LogLevel.ERROR
        log_event(self._logger, event, call.ctx, level=level, source=_SOURCE, **fields)

    def _finalize_text(self, text: str) -> str:
        return clean_generated_text(text) if self._normalize_text else text

    @staticmethod
    def _validate_absolute_url(url: str, provider: ProviderConfig) -> None:
        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            raise ConfigurationError(f"Invalid base URL: {url!r}", provider=provider.name) from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise ConfigurationError(f"Base URL is not an absolute http(s) URL: {url!r}", provider=provider.name)


__all__ = ["CompletionClient", "ConnectionProbe", "SettingsSource"]
