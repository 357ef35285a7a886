# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""pwderive internals.

Warning:
    Non-public package (implementation detail), provided for didactical
    and educational purposes only. Subject to change without notice,
    including removal.

"""

import pwderive

__all__ = ()

PROG_NAME = pwderive.__distribution_name__
VERSION = pwderive.__version__
AUTHOR = pwderive.__author__
