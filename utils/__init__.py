# Filesystem policy layer for the page editor backend
