# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""The requests names used by the connection gateway, importable from one place."""

from requests import HTTPError, Session  # noqa: F401
from requests.adapters import BaseAdapter, HTTPAdapter  # noqa: F401
from requests.exceptions import RequestException, SSLError  # noqa: F401
from requests.models import Response  # noqa: F401
from requests.structures import CaseInsensitiveDict  # noqa: F401
from requests.packages.urllib3.exceptions import InsecureRequestWarning  # noqa: F401
from requests.packages.urllib3.util.retry import Retry  # noqa: F401
