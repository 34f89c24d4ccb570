#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Generate printable offline tickets for an event.
"""

import offline_ticket_builder.cli


if __name__ == "__main__":
	offline_ticket_builder.cli.main()
