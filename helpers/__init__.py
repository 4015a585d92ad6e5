# helpers/__init__.py
"""Display-side glue for the web app: trail sampling, map rendering and the frame loop."""
