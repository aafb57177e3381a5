"""
Model capability checks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from structured_chat.config import ProviderConfig


def _bare_model_name(model: str) -> str:
    return model.split("/", 1)[1] if "/" in model else model


def supports_structured_output(model: str, config: ProviderConfig) -> bool:
    """Check whether ``model`` accepts a json_schema response_format.

    Every model supports it unless listed in ``config.unsupported_models``,
    matched either verbatim or without a ``provider/`` prefix.
    """
    unsupported = {m.lower() for m in config.unsupported_models}
    return (
        model.lower() not in unsupported
        and _bare_model_name(model).lower() not in unsupported
    )
