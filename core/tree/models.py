"""Node models for reconstructed component trees."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TextNode(BaseModel):
    """Plain text leaf."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["text"] = "text"
    content: str


class ElementNode(BaseModel):
    """Tagged element with properties and ordered children.

    Rules:
    - tag is never empty
    - props never carries a `children` key; children live in `children`
    """

    model_config = ConfigDict(extra="forbid")

    type: Literal["element"] = "element"
    tag: str = Field(min_length=1)
    props: dict[str, Any] = Field(default_factory=dict)
    children: list[Node] = Field(default_factory=list)

    @field_validator("props")
    @classmethod
    def _reject_children_prop(cls, value: dict[str, Any]) -> dict[str, Any]:
        if "children" in value:
            raise ValueError("props must not contain 'children'")
        return value


Node = Annotated[Union[TextNode, ElementNode], Field(discriminator="type")]

ElementNode.model_rebuild()
