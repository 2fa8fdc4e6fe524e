from lambdalogs.stack.api import LAMBDA_LOG_GROUP_PREFIX  # noqa
from lambdalogs.stack.api import LAMBDA_RESOURCE_TYPE  # noqa
from lambdalogs.stack.api import resolve_log_groups  # noqa
