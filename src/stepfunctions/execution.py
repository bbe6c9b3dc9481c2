"""Step Functions state machine executions.

The ``aws_sfn_execution`` resource starts one execution of a state
machine and tracks it by the execution ARN. Executions cannot be changed
once started, and deleting the resource only forgets it locally: the
execution keeps running (or stays finished) in AWS.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict
from botocore.exceptions import ClientError

from src.core.aws_client import AWSClientManager
from src.core.config import DEFAULT_RETRY_TIMEOUT_SECONDS
from src.core.errors import error_code
from src.core.resource import (
    Resource,
    ResourceData,
    require_fields,
    validate_arn,
    validate_json_string,
    validate_sfn_name,
)


logger = logging.getLogger(__name__)

NOT_FOUND_CODES = ("NotFoundException", "ExecutionDoesNotExist")


class ExecutionError(Exception):
    """Raised when an execution cannot be started."""
    pass


def format_start_date(start_date: Any) -> str:
    """Format an execution start date as RFC 3339."""
    if isinstance(start_date, datetime):
        if start_date.tzinfo is None or start_date.utcoffset() == timedelta(0):
            return start_date.strftime("%Y-%m-%dT%H:%M:%SZ")
        return start_date.replace(microsecond=0).isoformat()
    return str(start_date) if start_date is not None else ""


class SfnExecutionResource(Resource):
    """Starts and tracks a Step Functions execution."""

    type_name = "aws_sfn_execution"

    def __init__(
        self,
        aws_client: AWSClientManager,
        retry_timeout: float = DEFAULT_RETRY_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(aws_client, retry_timeout)
        self._sfn_client = None

    @property
    def sfn_client(self):
        """Get Step Functions client with lazy initialization."""
        if self._sfn_client is None:
            self._sfn_client = self.aws_client.get_client('stepfunctions')
        return self._sfn_client

    @property
    def supports_update(self) -> bool:
        return False

    def validate(self, attributes: Dict[str, Any]) -> None:
        require_fields(attributes, ["state_machine_arn"], self.type_name)
        validate_arn(attributes["state_machine_arn"], "state_machine_arn")
        if attributes.get("input") is not None:
            validate_json_string(attributes["input"], "input")
        if attributes.get("name") is not None:
            validate_sfn_name(attributes["name"], "name")

    def create(self, d: ResourceData) -> None:
        self.validate(d.attributes)
        logger.debug("Executing Step Function State Machine")

        params = {'stateMachineArn': d.get("state_machine_arn")}
        if d.get("input") is not None:
            params['input'] = d.get("input")
        if d.get("name") is not None:
            params['name'] = d.get("name")

        try:
            response = self.sfn_client.start_execution(**params)
        except ClientError as e:
            raise ExecutionError(f"Error running Step Function Execution: {e}") from e

        d.set_id(response['executionArn'])
        self.read(d)

    def read(self, d: ResourceData) -> None:
        logger.debug(f"Reading Step Function Execution: {d.id}")

        try:
            execution = self.sfn_client.describe_execution(executionArn=d.id)
        except ClientError as e:
            if error_code(e) in NOT_FOUND_CODES:
                logger.warning(f"Step Function Execution not found: {d.id}")
                d.set_id("")
                return
            raise

        d.set("execution_arn", execution.get('executionArn', d.id))
        d.set("input", execution.get('input'))
        d.set("name", execution.get('name'))
        d.set("status", execution.get('status'))
        d.set("start_date", format_start_date(execution.get('startDate')))

    def delete(self, d: ResourceData) -> None:
        logger.debug(f"Deleting Step Function Execution: {d.id}")
        d.set_id("")
