"""Exceptions raised by resolve-agent."""


class ResolveAgentError(Exception):
    """Base exception for resolve-agent errors"""
    pass


class OracleError(ResolveAgentError):
    """The text-generation backend failed to answer a query"""
    pass


class TargetError(ResolveAgentError):
    """The requested package or dependency file is not usable"""
    pass
