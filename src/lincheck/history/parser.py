# src/lincheck/history/parser.py
"""Parser capability supplied by a target-system adapter.

The replayer does not know what operations mean. An adapter turns record
payloads into the domain values its consistency model understands and
decides when a completion is still indeterminate.
"""

from typing import Any, Protocol, runtime_checkable

from lincheck.contracts import Completion


@runtime_checkable
class RecordParser(Protocol):
    """Decodes history payloads into domain values.

    `data` is the JSON-decoded `data` field of a history record, exactly
    as the recorder's encoder produced it.

    Error handling:
        Parsers reject a payload by raising ValueError (pydantic's
        ValidationError is a ValueError). Replay converts it into
        PayloadDecodeError and aborts. Any other exception is a parser bug
        and propagates unchanged.

    Purity:
        Decoding the same payload twice must yield equal values.
    """

    def decode_invocation(self, data: Any) -> Any:
        """Turn an invocation payload into a domain request value."""
        ...

    def decode_completion(self, data: Any) -> Completion:
        """Turn a completion payload into a domain response value.

        Returns:
            Resolved(value) when the outcome is known. UNRESOLVED when the
            operation may still take effect (e.g. the client timed out);
            no return event is emitted and the call stays pending.
        """
        ...

    def synthesize_unresolved_completion(self) -> Any:
        """Response value for an operation that never completed before the log ended.

        Typically a conservative "could have had any effect" placeholder
        appropriate to the model being checked.
        """
        ...
