"""AWS Sub-Resource Provider - Main Package.

This package manages sub-objects of CloudFront distributions (cache
behaviors, origins) and Step Functions executions as declarative resources.
"""

__version__ = "1.0.0"
__author__ = "AWS Sub-Resource Provider Team"
