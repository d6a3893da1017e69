"""
HTML pages for the documentation side of content negotiation.

Every function here is pure: it takes catalog objects and returns markup.
Interpolated values are always HTML-escaped.
"""

from __future__ import annotations

import json
from html import escape
from typing import Any, Iterable

from ..schemas import Agent, Endpoint
from .catalog import Catalog

TITLE = "Agent API Gateway"

BASE_STYLE = '''
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            line-height: 1.6;
            color: #333;
            background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
            min-height: 100vh;
            padding: 20px;
        }
        .container { max-width: 1200px; margin: 0 auto; }
        .card {
            background: white;
            border-radius: 16px;
            padding: 40px;
            margin-bottom: 30px;
            box-shadow: 0 10px 40px rgba(0, 0, 0, 0.1);
        }
        .breadcrumb { color: #eee; font-size: 14px; margin-bottom: 20px; }
        .card .breadcrumb { color: #666; }
        .breadcrumb a { color: #667eea; text-decoration: none; }
        .breadcrumb a:hover { text-decoration: underline; }
        .icon { font-size: 56px; }
        h1 { font-size: 36px; color: #1a1a1a; margin-bottom: 8px; }
        h2 { font-size: 24px; color: #1a1a1a; margin-bottom: 16px; }
        .muted { color: #666; }
        code, pre {
            font-family: 'Monaco', 'Courier New', monospace;
            background: #f4f4f8;
            border-radius: 6px;
            padding: 2px 6px;
        }
        pre { background: #1e1e1e; color: #d4d4d4; padding: 16px; overflow-x: auto; }
        .method-badge {
            display: inline-block;
            padding: 2px 10px;
            border-radius: 6px;
            font-size: 12px;
            font-weight: 700;
            color: white;
            background: #6b7280;
        }
        .method-get { background: #10b981; }
        .method-post { background: #3b82f6; }
        .method-put { background: #f59e0b; }
        .method-delete { background: #ef4444; }
        .grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(320px, 1fr)); gap: 20px; }
        .grid a.card { display: block; color: inherit; text-decoration: none; padding: 24px; margin: 0; }
        .grid a.card:hover { transform: translateY(-3px); }
        .note { background: #fef3c7; border-left: 4px solid #f59e0b; padding: 16px; border-radius: 8px; margin-top: 16px; }
        .footer { text-align: center; color: white; margin-top: 20px; }
        .footer a { color: white; font-weight: 600; }
        .code-header { display: flex; justify-content: space-between; align-items: center; margin: 16px 0 6px; }
        button {
            background: #667eea;
            color: white;
            border: none;
            padding: 8px 16px;
            border-radius: 6px;
            font-size: 14px;
            cursor: pointer;
        }
        button:hover { background: #5568d3; }
        button.copy-btn { padding: 4px 12px; font-size: 12px; }
        button.danger { background: #dc3545; }
        .form-group { display: flex; flex-direction: column; gap: 6px; margin-bottom: 16px; }
        select, input { padding: 10px; border: 1px solid #ddd; border-radius: 6px; font-size: 14px; }
        .tester-stats { display: flex; gap: 30px; margin-bottom: 20px; }
        .tester-stats .value { font-size: 22px; font-weight: 700; color: #667eea; }
        .tester-actions { display: flex; gap: 10px; flex-wrap: wrap; }
        .test-output {
            background: #1e1e1e;
            color: #d4d4d4;
            border-radius: 8px;
            padding: 16px;
            margin-top: 20px;
            max-height: 400px;
            overflow-y: auto;
            font-family: 'Monaco', 'Courier New', monospace;
            font-size: 13px;
        }
        .log-entry { padding: 4px 0; border-bottom: 1px solid #333; word-break: break-all; }
        .log-entry .timestamp { color: #888; margin-right: 8px; }
        .log-success { color: #10b981; }
        .log-error { color: #ef4444; }
        .log-info { color: #60a5fa; }
'''

COPY_SCRIPT = '''
    <script>
    (function() {
        document.addEventListener('click', function(e) {
            var button = e.target;
            if (!button.classList || !button.classList.contains('copy-btn')) {
                return;
            }
            var target = document.getElementById(button.getAttribute('data-copy-target'));
            if (!target || !navigator.clipboard) {
                return;
            }
            navigator.clipboard.writeText(target.textContent).then(function() {
                var label = button.textContent;
                button.textContent = 'Copied!';
                setTimeout(function() { button.textContent = label; }, 2000);
            });
        });
    })();
    </script>'''

TESTER_SCRIPT = '''
    <script>
    (function() {
        var queue = [];
        var requestCount = 0;
        var processing = false;
        var output = document.getElementById('test-output');
        var select = document.getElementById('tester-endpoint');

        function log(message, kind) {
            var entry = document.createElement('div');
            entry.className = 'log-entry';
            var stamp = document.createElement('span');
            stamp.className = 'timestamp';
            stamp.textContent = '[' + new Date().toLocaleTimeString() + ']';
            var text = document.createElement('span');
            text.className = 'log-' + (kind || 'info');
            text.textContent = message;
            entry.appendChild(stamp);
            entry.appendChild(text);
            output.appendChild(entry);
            output.scrollTop = output.scrollHeight;
        }

        function updateStats() {
            document.getElementById('tester-count').textContent = requestCount;
            document.getElementById('tester-queue').textContent = queue.length;
        }

        function delayMs() {
            var perMinute = parseInt(document.getElementById('tester-rate').value, 10);
            if (!perMinute || perMinute < 1) {
                perMinute = 1;
            }
            return Math.ceil(60000 / perMinute);
        }

        function sleep(ms) {
            return new Promise(function(resolve) { setTimeout(resolve, ms); });
        }

        async function send(item) {
            try {
                var response = await fetch(item.path, {
                    method: item.method,
                    headers: { 'Accept': 'application/json' }
                });
                var text = await response.text();
                if (response.ok) {
                    log('SUCCESS [' + item.method + '] ' + item.path + ' - Status: ' + response.status, 'success');
                    log('Response: ' + text.substring(0, 200), 'info');
                } else {
                    log('ERROR [' + item.method + '] ' + item.path + ' - Status: ' + response.status, 'error');
                    log('Error: ' + text.substring(0, 500), 'error');
                }
            } catch (err) {
                log('FAILED [' + item.method + '] ' + item.path + ' - ' + err.message, 'error');
            }
            requestCount++;
            updateStats();
        }

        async function processQueue() {
            if (processing || queue.length === 0) {
                return;
            }
            processing = true;
            while (queue.length > 0) {
                var item = queue.shift();
                updateStats();
                await send(item);
                if (queue.length > 0) {
                    await sleep(delayMs());
                }
            }
            processing = false;
            log('Queue processing complete.', 'success');
            updateStats();
        }

        function enqueue(option) {
            var item = { path: option.value, method: option.getAttribute('data-method') };
            log('Adding to queue: [' + item.method + '] ' + item.path, 'info');
            queue.push(item);
        }

        document.getElementById('tester-run').addEventListener('click', function() {
            var option = select.options[select.selectedIndex];
            if (!option || !option.value) {
                log('Please select an endpoint first.', 'error');
                return;
            }
            enqueue(option);
            updateStats();
            processQueue();
        });

        document.getElementById('tester-run-all').addEventListener('click', function() {
            var options = Array.prototype.slice.call(select.options, 1);
            if (options.length === 0) {
                log('No endpoints available.', 'error');
                return;
            }
            log('Adding all ' + options.length + ' endpoints to queue...', 'info');
            options.forEach(enqueue);
            updateStats();
            processQueue();
        });

        document.getElementById('tester-clear').addEventListener('click', function() {
            output.textContent = '';
            log('Logs cleared.', 'info');
        });

        updateStats();
    })();
    </script>'''

PAGE_HTML = '''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>{style}</style>
</head>
<body>
    <div class="container">
{body}
        <div class="footer">
            <p>Powered by <a href="/">{gateway}</a></p>
        </div>
    </div>
{script}
</body>
</html>'''


def _page(title: str, body: str, script: str = "") -> str:
    # str.replace instead of format(): the CSS is full of braces
    return (
        PAGE_HTML.replace("{style}", BASE_STYLE)
        .replace("{title}", escape(title))
        .replace("{gateway}", TITLE)
        .replace("{script}", script)
        .replace("{body}", body)
    )


def method_badges(methods: Iterable[str]) -> str:
    return " ".join(
        f'<span class="method-badge method-{escape(m.lower())}">{escape(m)}</span>' for m in methods
    )


def example_request_path(endpoint: Endpoint) -> str:
    """Path plus the declared example query string."""
    parameters = endpoint.parameters or ""
    if not parameters:
        return endpoint.path
    query = parameters if parameters.startswith("?") else f"?{parameters}"
    return f"{endpoint.path}{query}"


def code_header(label: str, target_id: str) -> str:
    return (
        f'<div class="code-header"><span class="muted">{escape(label)}</span>'
        f'<button type="button" class="copy-btn" data-copy-target="{escape(target_id)}">Copy</button></div>'
    )


def _format_example(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def render_endpoint_page(agent: Agent, endpoint: Endpoint, public_url: str) -> str:
    method = endpoint.primary_method
    example_url = f"{public_url}{example_request_path(endpoint)}"

    if endpoint.parameters:
        parameters = (
            '<p class="muted">Example query string:</p>'
            f"<pre><code>{escape(endpoint.parameters)}</code></pre>"
        )
    else:
        parameters = '<p class="muted">No parameters required.</p>'

    curl_example = (
        f"curl -X {method} \\\n"
        f'  -H "Accept: application/json" \\\n'
        f'  "{example_url}"'
    )
    python_example = (
        "import httpx\n\n"
        f'response = httpx.request("{method}", "{example_url}",\n'
        '                          headers={"Accept": "application/json"})\n'
        "data = response.json()"
    )

    body = f'''
        <div class="card">
            <div class="breadcrumb">
                <a href="/">Home</a> / <a href="/agents">Agents</a> /
                <a href="/agents/{escape(agent.id)}">{escape(agent.name)}</a> / {escape(endpoint.name)}
            </div>
            <div class="icon">{escape(agent.icon)}</div>
            <h1>{escape(endpoint.name)}</h1>
            <div class="muted">{escape(agent.name)}</div>
            <p class="description">{escape(endpoint.description)}</p>
            <p><strong>Method:</strong> {method_badges(endpoint.allowed_methods)}</p>
            <p><strong>Path:</strong> <code>{escape(endpoint.path)}</code></p>
        </div>
        <div class="card">
            <h2>Parameters</h2>
            {parameters}
        </div>
        <div class="card">
            <h2>Example Request</h2>
            {code_header("cURL", "curl-example")}
            <pre id="curl-example">{escape(curl_example)}</pre>
            {code_header("Python", "python-example")}
            <pre id="python-example">{escape(python_example)}</pre>
        </div>
        <div class="card">
            <h2>Example Response</h2>
            {code_header("JSON Response", "response-example")}
            <pre id="response-example">{escape(_format_example(endpoint.example_response))}</pre>
        </div>
        <div class="card">
            <h2>Access Methods</h2>
            <div class="note">
                Send <code>Accept: application/json</code> to have the gateway call the upstream
                service and return its data.
            </div>
            <div class="note">
                Send <code>Accept: text/html</code>, or open the URL in a browser, to see this page.
            </div>
        </div>'''
    return _page(f"{endpoint.name} - {agent.name}", body, COPY_SCRIPT)


def render_agents_page(catalog: Catalog) -> str:
    cards = []
    for agent in catalog.list_agents():
        count = catalog.endpoint_count(agent)
        cards.append(f'''
            <a href="/agents/{escape(agent.id)}" class="card">
                <div class="icon">{escape(agent.icon)}</div>
                <h2>{escape(agent.name)}</h2>
                <p class="muted">{escape(agent.description)}</p>
                <p><strong>{count} endpoint{"" if count == 1 else "s"}</strong></p>
            </a>''')

    body = f'''
        <div class="breadcrumb"><a href="/">Home</a> / Agents</div>
        <div class="card">
            <h1>Available Agents</h1>
            <p class="muted">Choose an agent to explore its endpoints</p>
        </div>
        <div class="grid">{"".join(cards)}
        </div>'''
    return _page(f"Available Agents - {TITLE}", body)


def render_agent_page(agent: Agent) -> str:
    cards = "".join(
        f'''
            <a href="{escape(endpoint.path)}" class="card">
                <h2>{escape(endpoint.name)}</h2>
                {method_badges(endpoint.allowed_methods)}
                <p class="muted">{escape(endpoint.description)}</p>
                <code>{escape(endpoint.path)}</code>
            </a>'''
        for endpoint in agent.endpoints
    )
    body = f'''
        <div class="breadcrumb"><a href="/">Home</a> / <a href="/agents">Agents</a> / {escape(agent.name)}</div>
        <div class="card">
            <div class="icon">{escape(agent.icon)}</div>
            <h1>{escape(agent.name)}</h1>
            <p class="muted">{escape(agent.description)}</p>
        </div>
        <h2 style="color: white;">Endpoints</h2>
        <div class="grid">{cards}
        </div>'''
    return _page(f"{agent.name} - {TITLE}", body)


def render_home_page(catalog: Catalog) -> str:
    endpoints = catalog.list_all_endpoints()
    rows = "".join(
        f'''
                <li>{escape(item.agent_icon)} {escape(item.agent_name)} -
                    <a href="{escape(item.path)}">{escape(item.endpoint.name)}</a>
                    {method_badges(item.endpoint.allowed_methods)}</li>'''
        for item in endpoints
    )
    options = "".join(
        f'''
                        <option value="{escape(item.path)}" data-method="{escape(item.endpoint.primary_method)}">'''
        f'''{escape(item.agent_icon)} {escape(item.agent_name)} - {escape(item.endpoint.name)}'''
        f''' ({escape("/".join(item.endpoint.allowed_methods))})</option>'''
        for item in endpoints
    )
    body = f'''
        <div class="card" style="text-align: center;">
            <h1>{TITLE}</h1>
            <p class="muted">Dynamic routing with content negotiation</p>
            <p class="muted">Every endpoint is a documentation page in a browser and a JSON API for clients.</p>
            <p style="margin-top: 20px;">
                <a href="/agents">Browse Agents</a> | <a href="/health">Health Check</a>
            </p>
            <p style="margin-top: 20px;">
                <strong>{len(catalog.list_agents())}</strong> Agents &middot;
                <strong>{len(endpoints)}</strong> Endpoints
            </p>
        </div>
        <div class="card">
            <h2>Endpoints</h2>
            <ul>{rows}
            </ul>
        </div>
        <div class="card" id="endpoint-tester">
            <h2>Endpoint Tester</h2>
            <p class="muted">Queue requests against the gateway's endpoints and watch the results.</p>
            <div class="tester-stats" style="margin-top: 16px;">
                <div><div class="muted">Requests Made</div><div class="value" id="tester-count">0</div></div>
                <div><div class="muted">Queue Size</div><div class="value" id="tester-queue">0</div></div>
            </div>
            <div class="form-group">
                <label for="tester-endpoint">Select Endpoint</label>
                <select id="tester-endpoint">
                        <option value="">Choose an endpoint...</option>{options}
                </select>
            </div>
            <div class="form-group">
                <label for="tester-rate">Pace (requests per minute)</label>
                <input type="number" id="tester-rate" value="10" min="1" max="60">
            </div>
            <div class="tester-actions">
                <button type="button" id="tester-run">Test Endpoint</button>
                <button type="button" id="tester-run-all">Test All Endpoints</button>
                <button type="button" id="tester-clear" class="danger">Clear Logs</button>
            </div>
            <div class="test-output" id="test-output">
                <div class="log-entry"><span class="log-info">Ready. Select an endpoint and click "Test Endpoint".</span></div>
            </div>
        </div>'''
    return _page(TITLE, body, TESTER_SCRIPT)


def render_not_found_page(url: str) -> str:
    body = f'''
        <div class="card" style="text-align: center;">
            <div class="icon" style="color: #667eea; font-weight: 700;">404</div>
            <h1>Page Not Found</h1>
            <p class="muted">The route <code>{escape(url)}</code> doesn't exist on this server.</p>
            <p style="margin-top: 20px;"><a href="/">Go Home</a></p>
        </div>'''
    return _page("404 - Not Found", body)
