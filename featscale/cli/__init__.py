# featscale/cli/__init__.py
