# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Report renderers."""

from .html import render_html_report, write_html_report

__all__ = ["render_html_report", "write_html_report"]
