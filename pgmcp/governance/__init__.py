"""Query governance for the PostgreSQL MCP Server.

Provides the decision core every tool call passes through:
- SQL command classification and access-level enforcement
- Result masking (hidden columns, redacted sensitive fields)
- Table and schema visibility filtering
"""
