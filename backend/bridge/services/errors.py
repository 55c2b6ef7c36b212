from __future__ import annotations


class BridgeError(Exception):
    pass


class ArgumentError(BridgeError):
    code = "ARG"


class ProviderUnavailableError(BridgeError):
    pass


class ProviderCapabilityError(BridgeError):
    pass


def summarize_exception_message(exc: BaseException, *, max_length: int = 220) -> str:
    raw = str(exc).strip()
    rendered = f"{type(exc).__name__}: {raw}" if raw else type(exc).__name__
    if len(rendered) <= max_length:
        return rendered
    return f"{rendered[: max_length - 3]}..."
