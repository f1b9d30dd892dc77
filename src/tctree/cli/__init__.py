# src/tctree/cli/__init__.py
