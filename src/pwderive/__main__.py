# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib
"""Run [`pwderive.cli.pwderive`][] on import."""

import sys

if __name__ == '__main__':
    from pwderive.cli import pwderive

    sys.exit(pwderive())
