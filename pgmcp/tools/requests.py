"""Typed tool requests.

Every tool call is validated into exactly one of these models before it
reaches the query guard, so the core never handles untyped arguments.
"""
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from pgmcp.utils.formatting import ResponseFormat


class ExecuteQueryInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    operation: Literal["execute_query"] = "execute_query"
    sql: str = Field(
        ...,
        description="SQL statement to execute against the PostgreSQL database",
        min_length=1,
        max_length=50000,
    )
    response_format: ResponseFormat = Field(default=ResponseFormat.JSON)


class GetSchemaInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    operation: Literal["get_schema"] = "get_schema"
    table: Optional[str] = Field(
        default=None,
        description="Table name to describe. Omit to describe every visible table.",
    )
    response_format: ResponseFormat = Field(default=ResponseFormat.JSON)


class ListTablesInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    operation: Literal["list_tables"] = "list_tables"
    response_format: ResponseFormat = Field(default=ResponseFormat.JSON)


ToolRequest = Annotated[
    Union[ExecuteQueryInput, GetSchemaInput, ListTablesInput],
    Field(discriminator="operation"),
]

