"""Landing page for the admin portal: ArcGIS sign-in/sign-up and session state."""

from html import escape


def render_root_page(app_name: str) -> str:
    """Return HTML for the landing page.

    The page asks /api/v1/auth/session for the resolved role and shows it;
    a ``?org=<slug>`` deep link is carried into the sign-up request.
    """
    title = escape(app_name)
    return f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
        * {{ box-sizing: border-box; }}
        body {{
            font-family: system-ui, sans-serif;
            margin: 0;
            min-height: 100vh;
            background: #000;
            color: #e0e0e0;
            padding: 2rem 1rem;
        }}
        .wrap {{ max-width: 560px; margin: 0 auto; }}
        .card {{
            background: #0c0c0c;
            border: 1px solid #1a1a1a;
            padding: 1.5rem 1.75rem;
            margin-bottom: 1.25rem;
        }}
        .card h2 {{
            font-size: 0.75rem;
            text-transform: uppercase;
            letter-spacing: 0.08em;
            color: #666;
            margin: 0 0 1rem 0;
        }}
        .btn {{
            display: inline-block;
            padding: 0.6rem 1.1rem;
            border: 1px solid #333;
            color: #fff;
            text-decoration: none;
            margin-right: 0.5rem;
        }}
        .error {{ color: #f88; }}
        code {{ font-family: ui-monospace, monospace; color: #aaa; }}
    </style>
</head>
<body>
    <div class="wrap">
        <h1>{title}</h1>

        <section class="card" aria-labelledby="session-heading">
            <h2 id="session-heading">Session</h2>
            <p id="session-state">Loading&hellip;</p>
            <p id="session-error" class="error" hidden></p>
        </section>

        <section class="card" aria-labelledby="signin-heading">
            <h2 id="signin-heading">ArcGIS Online</h2>
            <a id="signin" href="/api/v1/auth/arcgis/authorize?mode=signin" class="btn">Sign in</a>
            <a id="signup" href="/api/v1/auth/arcgis/authorize?mode=signup" class="btn">Create organization</a>
        </section>
    </div>
    <script>
        (function () {{
            var org = new URLSearchParams(window.location.search).get('org');
            if (org) {{
                var link = document.getElementById('signup');
                link.href += '&org=' + encodeURIComponent(org);
            }}
            fetch('/api/v1/auth/session', {{ credentials: 'same-origin' }})
                .then(function (r) {{ return r.json(); }})
                .then(function (s) {{
                    var text = s.state;
                    if (s.organization_id) text += ' · ' + s.organization_id;
                    if (s.reason) text += ' (' + s.reason + ')';
                    if (s.is_new_account) text += ' · welcome!';
                    document.getElementById('session-state').textContent = text;
                    if (s.error) {{
                        var el = document.getElementById('session-error');
                        el.textContent = s.error.message;
                        el.hidden = false;
                    }}
                }});
        }})();
    </script>
</body>
</html>
""".strip()
