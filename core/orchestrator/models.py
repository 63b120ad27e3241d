"""Parse outcome and aggregate report models."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from core.tree.models import Node

DataType = Literal["component-data", "module-loading"]


class ParseSuccess(BaseModel):
    """One call decoded successfully.

    Module-loading payloads always carry an empty node list.
    """

    model_config = ConfigDict(extra="forbid")

    status: Literal["success"] = "success"
    nodes: list[Node] = Field(default_factory=list)
    data_type: DataType
    debug_info: str | None = None

    @model_validator(mode="after")
    def _module_loading_has_no_nodes(self) -> ParseSuccess:
        if self.data_type == "module-loading" and self.nodes:
            raise ValueError("module-loading outcomes must not carry nodes")
        return self


class ParseFailure(BaseModel):
    """One call could not be decoded."""

    model_config = ConfigDict(extra="forbid")

    status: Literal["failure"] = "failure"
    error: str
    debug_info: str | None = None


ParseOutcome = Annotated[Union[ParseSuccess, ParseFailure], Field(discriminator="status")]


class IndexedOutcome(BaseModel):
    """Outcome of one call, tagged with its position in the document."""

    model_config = ConfigDict(extra="forbid")

    index: int = Field(ge=0)
    snippet_preview: str
    outcome: ParseOutcome

    @property
    def success(self) -> bool:
        return isinstance(self.outcome, ParseSuccess)

    @property
    def data_type(self) -> DataType | None:
        if isinstance(self.outcome, ParseSuccess):
            return self.outcome.data_type
        return None


class AggregateResult(BaseModel):
    """Document-level result.

    Rules:
    - counts and combined_nodes are derived from results, never stored
    - combined_nodes keeps call order, then discovery order within a call
    - only component-data successes contribute nodes
    """

    model_config = ConfigDict(extra="forbid")

    results: list[IndexedOutcome] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_scripts(self) -> int:
        return len(self.results)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success_count(self) -> int:
        return sum(1 for result in self.results if result.data_type == "component-data")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def module_loading_count(self) -> int:
        return sum(1 for result in self.results if result.data_type == "module-loading")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failure_count(self) -> int:
        return sum(1 for result in self.results if not result.success)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def combined_nodes(self) -> list[Node]:
        nodes: list[Node] = []
        for result in self.results:
            outcome = result.outcome
            if isinstance(outcome, ParseSuccess) and outcome.data_type == "component-data":
                nodes.extend(outcome.nodes)
        return nodes
