"""Constants for the AWS IAM Operator."""

# API Group
API_GROUP = "aws-iam.redradrat.xyz"
API_VERSION = "v1beta1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_ROLE = "Role"
KIND_POLICY = "Policy"
KIND_USER = "User"
KIND_POLICY_ATTACHMENT = "PolicyAttachment"

# Resource plurals
PLURAL_ROLES = "roles"
PLURAL_POLICIES = "policies"
PLURAL_USERS = "users"
PLURAL_POLICY_ATTACHMENTS = "policyattachments"

PLURALS = {
    KIND_ROLE: PLURAL_ROLES,
    KIND_POLICY: PLURAL_POLICIES,
    KIND_USER: PLURAL_USERS,
    KIND_POLICY_ATTACHMENT: PLURAL_POLICY_ATTACHMENTS,
}

# Finalizers
FINALIZER = f"{API_GROUP}/finalizer"

# Controller name used in structured logs
CONTROLLER_NAME = "aws-iam-operator"

# Status
SUCCESS_MESSAGE = "Succesfully reconciled"
LAST_SYNC_ATTEMPT_FORMAT = "%d %b %y %H:%M:%S %z"

# Managed policies keep at most five versions; one slot stays free for the next update
MAX_POLICY_VERSIONS = 4

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_RECONCILED = "Reconciled"
EVENT_REASON_DELETED = "Deleted"
