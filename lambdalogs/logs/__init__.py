from lambdalogs.logs.api import DEFAULT_MAX_WORKERS  # noqa
from lambdalogs.logs.api import WINDOW_OVERLAP_MS  # noqa
from lambdalogs.logs.api import LogEvent  # noqa
from lambdalogs.logs.api import SeenSet  # noqa
from lambdalogs.logs.api import Window  # noqa
from lambdalogs.logs.api import fetch_group_events  # noqa
from lambdalogs.logs.api import fetch_window  # noqa
from lambdalogs.logs.api import merge_events  # noqa
from lambdalogs.logs.render import LineRenderer  # noqa
from lambdalogs.logs.poll import PollScheduler  # noqa
from lambdalogs.logs.poll import PollState  # noqa
