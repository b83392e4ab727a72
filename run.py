#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Chat Markdown - Convert a saved AI chat page into Markdown

Reads an HTML file (or stdin), detects the chat platform, and prints the
conversation as Markdown. See ``python run.py --help``.
"""

import sys

from chat_markdown.cli import main

if __name__ == "__main__":
    sys.exit(main())
