from __future__ import annotations
import math, urllib.parse
from typing import Optional

def human_size(n: Optional[int]) -> str:
    if not n or n <= 0: return "?"
    units = ["B","KB","MB","GB","TB"]
    i = min(int(math.floor(math.log(n, 1024))), len(units) - 1)
    return f"{n/(1024**i):.2f} {units[i]}"

def url_leaf_name(u: str) -> str:
    path = urllib.parse.urlsplit(u or "").path
    return urllib.parse.unquote(path.split("/")[-1]) or "download.bin"
