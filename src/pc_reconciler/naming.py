"""Function naming and ARN utilities.

Lambda function ARNs for a published version have the form::

    arn:aws:lambda:<region>:<account-id>:function:<function-name>:<version>

Unqualified ARNs (seven segments) and anything shorter carry no version.
"""

ARN_SEPARATOR = ":"

QUALIFIED_ARN_SEGMENTS = 8
"""Number of colon-delimited segments in a version-qualified function ARN."""


def qualified_name(service: str, stage: str, function: str) -> str:
    """
    Build the deployed function name for a manifest entry.

    Args:
        service: Service name from the manifest
        stage: Deployment stage (e.g., 'dev', 'prod')
        function: Function key as declared under ``functions``

    Returns:
        Name in the ``{service}-{stage}-{function}`` convention
    """
    return f"{service}-{stage}-{function}"


def extract_version(arn: str | None) -> str | None:
    """
    Extract the version qualifier from a function ARN.

    Returns None for empty or malformed ARNs (too few segments) so callers
    can skip the record instead of failing.
    """
    if not arn:
        return None

    parts = arn.split(ARN_SEPARATOR)
    if len(parts) < QUALIFIED_ARN_SEGMENTS:
        return None

    version = parts[QUALIFIED_ARN_SEGMENTS - 1]
    return version or None
