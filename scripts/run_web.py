import os
import sys
from pathlib import Path

import flet as ft

# Ensure project root is in path (running from scripts/)
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from grid_app.main import run

if __name__ == "__main__":
    port = int(os.getenv("GRID_WEB_PORT", "8550"))
    print(f"Starting web app on port {port}...")
    run(port=port, view=ft.AppView.WEB_BROWSER)
