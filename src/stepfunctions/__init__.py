"""Step Functions resources."""

from src.stepfunctions.execution import SfnExecutionResource, ExecutionError

__all__ = ['SfnExecutionResource', 'ExecutionError']
