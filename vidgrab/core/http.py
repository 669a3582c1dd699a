# vidgrab/core/http.py
from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter

from .. import __version__

UA = f"vidgrab/{__version__}"

def make_session() -> requests.Session:
    # Retries are owned by download.fetch (fixed attempts + backoff), not urllib3.
    adapter = HTTPAdapter(max_retries=0, pool_connections=4, pool_maxsize=4)
    s = requests.Session()
    s.mount("http://", adapter); s.mount("https://", adapter)
    s.headers.update({"User-Agent": UA})
    return s

SESSION = make_session()
