#!/usr/bin/env python3
"""
GitHub stats badge generator.

Collects (REST v3):
- Repository count (incl. private ones when a token is given)
- Star count (sum over repos)
- Fork count (sum over repos)
- Follower count (best effort)

Environment Variables:
  GH_README_STATS_TOKEN (optional) : Personal token. Enables /user/repos (private repos)
                                     and /user for the follower count.
  USERNAME                         : GitHub login. Default ok406lhq.
  REQUEST_TIMEOUT (optional)       : Seconds per HTTP call. Unset => no timeout.
  DEBUG                            : '1' => print request level details.

Output SVG file: images/stats.svg (directory must exist)
"""

from __future__ import annotations
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple
from xml.sax.saxutils import escape

import requests
from lxml import etree

# ------------------ Constants ------------------
API_BASE = "https://api.github.com"
USER_AGENT = "github-stats-generator"
DEFAULT_USER_NAME = "ok406lhq"
OUTPUT_PATH = "images/stats.svg"

PER_PAGE = 100
MAX_PAGES = 1000  # 100k repos; a full page past this means the endpoint misbehaves

SVG_WIDTH = 460
SVG_HEIGHT = 140

DEBUG = os.environ.get("DEBUG", "0") == "1"

def debug(msg: str):
    if DEBUG:
        print(f"[DEBUG] {msg}")

# ------------------ Config ------------------
@dataclass(frozen=True)
class Config:
    token: Optional[str] = None
    user_name: str = DEFAULT_USER_NAME
    output_path: str = OUTPUT_PATH
    timeout: Optional[float] = None

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        env = os.environ if environ is None else environ
        timeout: Optional[float] = None
        raw_timeout = env.get("REQUEST_TIMEOUT", "")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                print(f"Invalid REQUEST_TIMEOUT {raw_timeout!r}. Using no timeout.", file=sys.stderr)
            else:
                if timeout <= 0:
                    print(f"REQUEST_TIMEOUT must be positive, got {raw_timeout!r}. Using no timeout.", file=sys.stderr)
                    timeout = None
        return cls(
            token=env.get("GH_README_STATS_TOKEN") or None,
            user_name=env.get("USERNAME") or DEFAULT_USER_NAME,
            timeout=timeout,
        )

def build_headers(config: Config) -> Dict[str, str]:
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "application/vnd.github+json",
    }
    if config.authenticated:
        headers["Authorization"] = f"token {config.token}"
    return headers

# ------------------ HTTP ------------------
class GitHubHTTPError(RuntimeError):
    """Non-2xx answer from the API. Keeps everything needed to diagnose it."""

    def __init__(self, status_code: int, reason: str, url: str, body: str):
        self.status_code = status_code
        self.reason = reason
        self.url = url
        self.body = body
        super().__init__(f"HTTP {status_code} {reason} for {url}\n{body}")

def fetch_json(url: str, config: Config, params: Optional[Dict[str, Any]] = None) -> Any:
    r = requests.get(url, params=params, headers=build_headers(config), timeout=config.timeout)
    if not 200 <= r.status_code < 300:
        raise GitHubHTTPError(r.status_code, r.reason or "", r.url or url, r.text)
    return r.json()

# ------------------ Data Collection ------------------
def repos_url(config: Config) -> Tuple[str, Dict[str, Any]]:
    # /user/repos can include private repos, but only with a token
    if config.authenticated:
        return f"{API_BASE}/user/repos", {"affiliation": "owner"}
    return f"{API_BASE}/users/{config.user_name}/repos", {}

def fetch_all_repos(config: Config, max_pages: int = MAX_PAGES) -> List[Dict[str, Any]]:
    """
    Return every repository of the account, in API order.

    Stops on an empty, non-list or short (< PER_PAGE) page. A full page at
    max_pages raises RuntimeError instead of returning a truncated list.
    """
    url, base_params = repos_url(config)
    repos: List[Dict[str, Any]] = []
    for page in range(1, max_pages + 1):
        params = dict(base_params, per_page=PER_PAGE, page=page)
        data = fetch_json(url, config, params)
        if not isinstance(data, list) or not data:
            debug(f"repos page {page}: empty, stopping")
            return repos
        repos.extend(data)
        debug(f"repos page {page}: {len(data)} entries ({len(repos)} total)")
        if len(data) < PER_PAGE:
            return repos
    raise RuntimeError(f"Pagination of {url} did not terminate after {max_pages} pages")

@dataclass(frozen=True)
class ProfileResult:
    followers: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

def profile_url(config: Config) -> str:
    if config.authenticated:
        return f"{API_BASE}/user"
    return f"{API_BASE}/users/{config.user_name}"

def fetch_profile(config: Config) -> ProfileResult:
    """Best effort: any failure becomes ProfileResult(followers=0, error=...)."""
    url = profile_url(config)
    try:
        user = fetch_json(url, config)
        followers = int(user.get("followers") or 0)
    except Exception as e:
        debug(f"profile fetch failed for {url}: {e}")
        return ProfileResult(followers=0, error=str(e) or type(e).__name__)
    debug(f"profile: {followers} followers")
    return ProfileResult(followers=followers)

# ------------------ Aggregation ------------------
@dataclass(frozen=True)
class Summary:
    account_name: str
    total_repos: int
    private_count: int
    star_sum: int
    fork_sum: int
    follower_count: int

def aggregate(account_name: str, repos: List[Dict[str, Any]], follower_count: int) -> Summary:
    return Summary(
        account_name=account_name,
        total_repos=len(repos),
        private_count=sum(1 for r in repos if r.get("private")),
        star_sum=sum(r.get("stargazers_count") or 0 for r in repos),
        fork_sum=sum(r.get("forks_count") or 0 for r in repos),
        follower_count=follower_count,
    )

# ------------------ SVG ------------------
SVG_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<svg width="{w}" height="{h}" viewBox="0 0 {w} {h}" xmlns="http://www.w3.org/2000/svg">
  <style>
    .title{{font:700 18px system-ui; fill:#0f172a;}}
    .label{{font:600 12px system-ui; fill:#334155;}}
    .value{{font:700 20px system-ui; fill:#0f172a;}}
    .small{{font:400 11px system-ui; fill:#475569;}}
  </style>
  <rect rx="10" width="100%" height="100%" fill="#f8fafc"/>
  <g transform="translate(20,20)">
    <text class="title">{name} · GitHub Stats</text>
    <g transform="translate(0,28)">
      <text class="label">Repositories</text>
      <text class="value" x="180">{repos}</text>
      <text class="small" x="260">private: {private}</text>
    </g>
    <g transform="translate(0,62)">
      <text class="label">Stars</text>
      <text class="value" x="180">{stars}</text>
      <text class="label" x="260">Forks</text>
      <text class="value" x="330">{forks}</text>
    </g>
    <g transform="translate(0,96)">
      <text class="label">Followers</text>
      <text class="value" x="180">{followers}</text>
    </g>
  </g>
</svg>"""

def render_svg(summary: Summary) -> str:
    return SVG_TEMPLATE.format(
        w=SVG_WIDTH,
        h=SVG_HEIGHT,
        name=escape(summary.account_name),
        repos=summary.total_repos,
        private=summary.private_count,
        stars=summary.star_sum,
        forks=summary.fork_sum,
        followers=summary.follower_count,
    )

def write_svg(svg: str, path: str = OUTPUT_PATH):
    """Parse check, then overwrite path in one write. Does not create directories."""
    root = etree.fromstring(svg.encode("utf-8"))
    if etree.QName(root).localname != "svg":
        raise ValueError(f"Rendered document root is <{root.tag}>, expected <svg>")
    with open(path, "w", encoding="utf-8") as f:
        f.write(svg)

# ------------------ Main ------------------
def main(environ: Optional[Mapping[str, str]] = None) -> int:
    config = Config.from_env(environ)
    debug(f"user={config.user_name} authenticated={config.authenticated}")

    try:
        repos = fetch_all_repos(config)
    except (requests.RequestException, RuntimeError) as e:
        print(f"Error generating stats: {e}", file=sys.stderr)
        return 1

    profile = fetch_profile(config)
    summary = aggregate(config.user_name, repos, profile.followers)
    debug(f"summary: {summary}")

    write_svg(render_svg(summary), config.output_path)
    print(f"Saved {config.output_path}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
