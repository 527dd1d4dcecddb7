"""Roll-call offline package.

Organized by feature modules (attendance, drafts, offline, sync, ...) with a
thin Flask controller layer over service/repository layers. The offline core
keeps unsent roll calls on the device and delivers them once the remote store
is reachable again.
"""
