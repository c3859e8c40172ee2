"""Langfuse integration for provider call observability."""

from contextlib import contextmanager
from typing import Any, Iterator

from langfuse import Langfuse

from .config import Config


class TracingClient:
    """Langfuse tracing client. A no-op unless ``langfuse.enabled`` is set."""

    def __init__(self, config: Config):
        self.config = config
        self.enabled = config.langfuse.enabled
        self._client: Langfuse | None = None

        if self.enabled:
            self._client = Langfuse(
                public_key=config.langfuse.public_key,
                secret_key=config.langfuse.secret_key,
                host=config.langfuse.host,
            )

    @contextmanager
    def span(
        self,
        name: str,
        input_data: Any = None,
        metadata: dict | None = None,
    ) -> Iterator[Any]:
        """Wrap a provider call in a span. Yields None when tracing is off."""
        if not self.enabled or not self._client:
            yield None
            return

        with self._client.start_as_current_span(
            name=name,
            input=input_data,
            metadata=metadata or {},
        ) as span:
            yield span

    def record_output(self, span: Any, output_data: Any) -> None:
        if span is not None:
            span.update(output=output_data)

    def flush(self) -> None:
        """Flush pending events to Langfuse."""
        if self._client:
            self._client.flush()
