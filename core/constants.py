"""Common constants shared across attachcheck modules."""

POLICY_ATTACHMENT_TYPE = "aws_iam_policy_attachment"
USER_TYPE = "aws_iam_user"
ROLE_TYPE = "aws_iam_role"
GROUP_TYPE = "aws_iam_group"
POLICY_TYPE = "aws_iam_policy"

DEFAULT_REGION = "us-west-2"

# IAM returns at most 100 items per ListEntitiesForPolicy page by default.
DEFAULT_PAGE_SIZE = 100
PAGINATED_USER_COUNT = DEFAULT_PAGE_SIZE + 1

ACCEPTANCE_ENV = "TF_ACC"
