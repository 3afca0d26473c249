# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Bootstrap of the container user when entering a seabox container."""
