"""Agent API Gateway: content-negotiated documentation and proxying for upstream APIs."""

__version__ = "1.0.0"
