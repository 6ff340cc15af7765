# featscale/utils/__init__.py
