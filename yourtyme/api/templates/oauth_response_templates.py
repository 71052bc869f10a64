"""
HTML response templates for the Slack install flow.
"""

from html import escape
from typing import Optional

PAGE_STYLE = """
        * {
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }

        body {
            font-family: 'Inter', -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: #1A1D21;
            min-height: 100vh;
            display: flex;
            align-items: center;
            justify-content: center;
            padding: 2rem;
            color: #FFFFFF;
        }

        .container {
            width: 100%;
            max-width: 720px;
            text-align: center;
            animation: fadeIn 0.6s ease-out;
        }

        @keyframes fadeIn {
            from {
                opacity: 0;
                transform: translateY(20px);
            }
            to {
                opacity: 1;
                transform: translateY(0);
            }
        }

        h1 {
            font-size: 2.5rem;
            font-weight: 800;
            margin-bottom: 1.5rem;
            letter-spacing: 0.05em;
        }

        .subtitle {
            font-size: 1rem;
            font-weight: 500;
            color: #A0A0A0;
            line-height: 1.6;
            margin-bottom: 2.5rem;
        }

        .details {
            text-align: left;
            margin: 0 auto 2.5rem;
            border-collapse: collapse;
        }

        .details th,
        .details td {
            padding: 0.5rem 1rem;
            border-bottom: 1px solid #333333;
        }

        .details th {
            color: #A0A0A0;
            font-weight: 600;
        }

        .return-button {
            background: linear-gradient(135deg, #4A154B, #611F69);
            color: #FFFFFF;
            border-radius: 3rem;
            padding: 1rem 2.5rem;
            font-size: 1rem;
            font-weight: 700;
            text-decoration: none;
            display: inline-block;
            box-shadow: 0 8px 24px rgba(74, 21, 75, 0.4);
        }

        .error h1 {
            color: #F87171;
        }

        @media (max-width: 640px) {
            h1 {
                font-size: 1.75rem;
            }
        }
"""


def render_page(title: str, body: str, css_class: str = "") -> str:
    """Wrap page content in the shared YourTyme layout."""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)} - YourTyme</title>
    <link rel="preconnect" href="https://fonts.googleapis.com">
    <link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>
    <link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700;800&display=swap" rel="stylesheet">
    <style>{PAGE_STYLE}    </style>
</head>
<body>
    <div class="container {css_class}">
{body}
    </div>
</body>
</html>
"""


def get_oauth_error_template(
    error_message: str, status_code: Optional[int] = None
) -> str:
    """
    Generate HTML template for a failed Slack sign in.
    """
    code_line = (
        f'        <p class="subtitle">Error code: {status_code}</p>\n'
        if status_code
        else ""
    )
    body = f"""        <h1>Slack Sign In Failed</h1>
        <p class="subtitle">
            {escape(error_message)}
        </p>
{code_line}        <a href="/slack/install" class="return-button">
            Try Again
        </a>"""
    return render_page("Slack Sign In Failed", body, css_class="error")


def get_oauth_generic_error_template(error_message: str) -> str:
    """
    Generate HTML template for an unexpected install flow error.
    """
    body = f"""        <h1>Something Went Wrong</h1>
        <p class="subtitle">
            An unexpected error occurred while connecting to Slack: {escape(error_message)}
        </p>
        <a href="/slack/install" class="return-button">
            Try Again
        </a>"""
    return render_page("Install Error", body, css_class="error")
