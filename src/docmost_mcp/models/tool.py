# Tool domain models
# Tool definitions and their MCP protocol representation

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ParamType = Literal["string", "object", "integer", "number", "boolean", "array"]


class ToolParameter(BaseModel):
    """Contract for a single named tool parameter."""

    model_config = ConfigDict(frozen=True)

    type: ParamType = "string"
    required: bool = False
    nullable: bool = False
    description: str = ""

    def to_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": [self.type, "null"] if self.nullable else self.type}
        if self.description:
            schema["description"] = self.description
        return schema


class ToolDefinition(BaseModel):
    """Internal representation of an invocable tool in the registry."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique tool identifier")
    description: str = Field(..., description="Human-readable description of the tool")
    params: dict[str, ToolParameter] = Field(
        default_factory=dict, description="Parameter name to parameter contract"
    )
    mutating: bool = Field(
        default=False, description="Creates or updates content; hidden in read-only mode"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure name is not blank."""
        if not v.strip():
            raise ValueError("Tool name cannot be empty")
        return v

    @property
    def required_params(self) -> list[str]:
        return [name for name, param in self.params.items() if param.required]

    def input_schema(self) -> dict[str, Any]:
        """JSON Schema for the tool's arguments."""
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {name: param.to_json_schema() for name, param in self.params.items()},
        }
        if self.required_params:
            schema["required"] = self.required_params
        return schema

    def to_catalog_entry(self) -> dict[str, Any]:
        """Compact shape served by the plain HTTP catalog endpoints."""
        return {
            "name": self.name,
            "description": self.description,
            "params": {name: param.model_dump() for name, param in self.params.items()},
        }

    def to_mcp(self) -> "MCPTool":
        return MCPTool(name=self.name, description=self.description, inputSchema=self.input_schema())


class MCPTool(BaseModel):
    """Tool definition in MCP protocol format."""

    name: str = Field(..., description="Tool name in MCP format")
    description: str = Field(..., description="Tool description for LLM consumption")
    inputSchema: dict[str, Any] = Field(  # noqa: N815
        ..., description="JSON Schema for tool inputs"
    )
