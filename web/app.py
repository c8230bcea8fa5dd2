import os
import time
from functools import lru_cache
from flask import Flask, jsonify, abort, request, send_file

from w3g import W3GError, load_w3g, result_to_dict

# ── Paths / settings ───────────────────────────────────────────────────────────

BASE_DIR   = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
REPLAY_DIR = os.environ.get('W3G_REPLAY_DIR', os.path.join(BASE_DIR, 'replays'))
REPLAY_EXT = '.w3g'

# ── App ────────────────────────────────────────────────────────────────────────

app = Flask(__name__)

# ── Data helpers ───────────────────────────────────────────────────────────────

_REPLAY_CACHE: dict = {'data': None, 'expires': 0.0}
_REPLAY_CACHE_TTL = 60  # seconds — re-scan disk at most once per minute


def _get_all_replays() -> list:
    """Return full sorted replay list, refreshed at most every TTL seconds."""
    now = time.time()
    if _REPLAY_CACHE['data'] is None or now > _REPLAY_CACHE['expires']:
        result: list = []
        for dirpath, _dirs, files in os.walk(REPLAY_DIR):
            for fname in files:
                if not fname.lower().endswith(REPLAY_EXT):
                    continue
                abspath = os.path.join(dirpath, fname)
                result.append({
                    'filename': os.path.relpath(abspath, REPLAY_DIR).replace(os.sep, '/'),
                    'size':     os.path.getsize(abspath),
                    'mtime':    os.path.getmtime(abspath),
                })
        result.sort(key=lambda r: r['mtime'], reverse=True)
        _REPLAY_CACHE['data'] = result
        _REPLAY_CACHE['expires'] = now + _REPLAY_CACHE_TTL
    return _REPLAY_CACHE['data']


def _replay_path(filename: str) -> str:
    """Resolve filename against REPLAY_DIR; 400 if it escapes, 404 if missing."""
    path = os.path.abspath(os.path.join(REPLAY_DIR, filename.replace('/', os.sep)))
    if not path.startswith(os.path.abspath(REPLAY_DIR) + os.sep):
        abort(400)
    if not os.path.isfile(path):
        abort(404)
    return path


@lru_cache(maxsize=8)
def _load_w3g_cached(path: str, mtime: float) -> dict:
    """Parse and cache a replay summary (no full event list)."""
    return result_to_dict(load_w3g(path))


# ── Routes ─────────────────────────────────────────────────────────────────────

@app.route('/')
def index():
    return jsonify({
        'service': 'w3g-replay',
        'endpoints': ['/api/replays', '/api/dirs', '/api/replay/<path>',
                      '/download/<path>'],
    })


@app.route('/api/replays')
def api_replays():
    """Paginated, filterable replay list.

    Query params:
      dir      — only return files inside this subdir (prefix match)
      q        — case-insensitive substring filter on filename
      page     — 1-based page number (default 1)
      per_page — items per page (default 100, max 500)
    """
    all_r = _get_all_replays()

    dir_filter = request.args.get('dir', '').strip('/')
    q          = request.args.get('q', '').lower().strip()
    try:
        page     = max(1, int(request.args.get('page', 1)))
        per_page = min(500, max(1, int(request.args.get('per_page', 100))))
    except ValueError:
        page, per_page = 1, 100

    filtered = all_r
    if dir_filter:
        prefix = dir_filter + '/'
        filtered = [r for r in filtered if r['filename'].startswith(prefix)]
    if q:
        filtered = [r for r in filtered if q in r['filename'].lower()]

    total = len(filtered)
    start = (page - 1) * per_page
    items = filtered[start:start + per_page]

    return jsonify({
        'total':    total,
        'page':     page,
        'per_page': per_page,
        'pages':    max(1, (total + per_page - 1) // per_page),
        'items':    items,
    })


@app.route('/api/dirs')
def api_dirs():
    """Return sorted list of all subdirectory paths that contain replays."""
    dirs: set = set()
    for r in _get_all_replays():
        parts = r['filename'].split('/')
        # Add every ancestor path (so nested folders are all listed)
        for i in range(1, len(parts)):
            dirs.add('/'.join(parts[:i]))
    return jsonify(sorted(dirs))


@app.route('/api/replay/<path:filename>')
def api_replay(filename: str):
    path = _replay_path(filename)
    with_events = request.args.get('events', 0, type=int)
    start = time.perf_counter()
    try:
        if with_events:
            data = result_to_dict(load_w3g(path, keep_events=True))
        else:
            data = _load_w3g_cached(path, os.path.getmtime(path))
    except W3GError:
        app.logger.exception('Failed to parse %s', filename)
        return jsonify({'error': 'Failed to parse replay', 'filename': filename}), 500
    app.logger.info('Served %s in %.0f ms', filename, (time.perf_counter() - start) * 1000.0)
    return jsonify(data)


@app.route('/download/<path:filename>')
def download_replay(filename: str):
    """Serve the raw .w3g file as a download attachment."""
    path = _replay_path(filename)
    return send_file(path, as_attachment=True, download_name=os.path.basename(filename))


# ── Dev server ─────────────────────────────────────────────────────────────────

if __name__ == '__main__':
    debug = os.environ.get('FLASK_DEBUG', 'true').lower() == 'true'
    host  = os.environ.get('W3G_HOST', '0.0.0.0')
    port  = int(os.environ.get('W3G_PORT', '5000'))
    app.run(debug=debug, host=host, port=port)
