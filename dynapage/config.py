from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel, ConfigDict

TokenSpec = Union[str, list[str], None]


class PaginatorConfig(BaseModel):
    """
    Declarative pagination options for one operation.

    Mirrors the entries of botocore's ``paginators-1.json`` models, so registry
    entries and caller overrides share one shape. Keys the caller sets explicitly
    are tracked by pydantic (``model_fields_set``); that is what lets an explicit
    ``output_token=None`` switch pagination off instead of falling back to a default.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    input_token: TokenSpec = None
    output_token: TokenSpec = None
    more_results: str | None = None
    limit_key: str | None = None
    result_key: TokenSpec = None


@dataclass(frozen=True)
class Disabled:
    """The operation is not paginated: exactly one page is fetched."""


@dataclass(frozen=True)
class Tokenized:
    """
    Token propagation contract.

    ``output_fields[i]`` is read from a finished page and sent as
    ``input_fields[i]`` on the next request.
    """

    input_fields: tuple[str, ...]
    output_fields: tuple[str, ...]

    def pairs(self) -> tuple[tuple[str, str], ...]:
        return tuple(zip(self.input_fields, self.output_fields))


@dataclass(frozen=True)
class Flagged:
    """A boolean page field gates continuation, optionally alongside tokens."""

    continue_field: str
    tokenized: Tokenized | None = None


PaginationContract = Union[Disabled, Tokenized, Flagged]


def as_fields(value: TokenSpec) -> tuple[str, ...]:
    """Normalizes a single field name or a sequence of names to a tuple."""
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def coerce_config(config: "PaginatorConfig | Mapping[str, Any] | None") -> PaginatorConfig:
    """Accepts a PaginatorConfig, a plain dict of options, or None."""
    if config is None:
        return PaginatorConfig()
    if isinstance(config, PaginatorConfig):
        return config
    return PaginatorConfig.model_validate(dict(config))


def merge_config(
    overrides: "PaginatorConfig | Mapping[str, Any] | None",
    default: PaginatorConfig | None = None,
) -> PaginatorConfig:
    """
    Overlays the caller's explicitly-set keys on top of the default config.

    Keys the caller did not set fall back to the default, key by key.
    """
    override_cfg = coerce_config(overrides)
    merged = default.model_dump() if default is not None else {}
    merged.update(override_cfg.model_dump(exclude_unset=True))
    return PaginatorConfig(**merged)


def resolve_contract(
    overrides: "PaginatorConfig | Mapping[str, Any] | PaginationContract | None",
    default: PaginatorConfig | None = None,
) -> PaginationContract:
    """
    Resolves caller overrides plus the operation's default into a canonical contract.

    Rules:
    - An explicitly empty ``output_token`` (None, "" or []) disables pagination,
      regardless of the default.
    - ``input_token`` / ``output_token`` may be a name or a list of names; lists are
      paired by position. Lists of unequal length are paired up to the shorter one
      without complaint: contract validation belongs to whoever supplies the contract.
    - ``more_results`` becomes the continuation flag and combines with tokens.
    - With neither tokens nor a flag, the operation is treated as not paginated.
    """
    if isinstance(overrides, (Disabled, Tokenized, Flagged)):
        return overrides

    override_cfg = coerce_config(overrides)
    if "output_token" in override_cfg.model_fields_set and not override_cfg.output_token:
        return Disabled()

    config = merge_config(override_cfg, default)

    input_fields = as_fields(config.input_token)
    output_fields = as_fields(config.output_token)
    size = min(len(input_fields), len(output_fields))

    tokenized: Tokenized | None = None
    if size:
        tokenized = Tokenized(input_fields[:size], output_fields[:size])

    if config.more_results:
        return Flagged(continue_field=config.more_results, tokenized=tokenized)
    if tokenized is not None:
        return tokenized
    return Disabled()
