#!/usr/bin/env python3
"""
Nosabos Language Learning Server - launcher

Boots uvicorn in a child process, waits for /health, then offers a small
console for poking at exercises, the skill tree and the WebSocket session.
"""

import asyncio
import importlib
import json
import logging
import signal
import subprocess
import sys
import threading
import time
from pathlib import Path

import requests

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# import name -> distribution name
REQUIRED_MODULES = {
    "fastapi": "fastapi",
    "uvicorn": "uvicorn",
    "websockets": "websockets",
    "numpy": "numpy",
    "pydantic_settings": "pydantic-settings",
    "sqlalchemy": "sqlalchemy",
    "aiosqlite": "aiosqlite",
    "redis": "redis",
    "firebase_admin": "firebase-admin",
    "google.genai": "google-genai",
    "bech32": "bech32",
    "coincurve": "coincurve",
}

SMOKE_NPUB = "npub_smoke_test"


class ServerLauncher:
    def __init__(self):
        self.project_root = Path(__file__).parent
        self.server_process = None
        self.running = False
        self.port = 8000

    @property
    def base_url(self) -> str:
        return f"http://localhost:{self.port}"

    def check_dependencies(self) -> bool:
        missing = []
        for module, dist in REQUIRED_MODULES.items():
            try:
                importlib.import_module(module)
            except ImportError:
                missing.append(dist)

        if missing:
            logger.error(f"❌ Missing packages: {', '.join(missing)}")
            logger.info("Run: pip install -e .")
            return False
        logger.info("✅ All required packages found")
        return True

    def check_configuration(self) -> bool:
        from nosabos.config import settings

        self.port = settings.server_port
        errors = 0
        for issue in settings.validate_config():
            if issue.startswith("ERROR"):
                logger.error(issue)
                errors += 1
            else:
                logger.warning(issue)

        if errors:
            logger.error(f"❌ {errors} configuration error(s); fix .env and retry")
            return False
        logger.info("✅ Configuration validated")
        return True

    def start_server(self) -> bool:
        logger.info(f"🚀 Starting API server on port {self.port}...")
        self.server_process = subprocess.Popen(
            [sys.executable, "-m", "uvicorn", "nosabos.main:app",
             "--host", "0.0.0.0", "--port", str(self.port), "--log-level", "info"],
            cwd=self.project_root,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            universal_newlines=True,
            bufsize=1
        )

        def echo_output():
            for line in iter(self.server_process.stdout.readline, ''):
                if line.strip():
                    print(f"[SERVER] {line.rstrip()}")

        threading.Thread(target=echo_output, daemon=True).start()
        return self.wait_until_ready()

    def wait_until_ready(self, timeout: float = 20.0) -> bool:
        """Poll /health until the managers report in or the child exits"""
        deadline = time.time() + timeout
        while time.time() < deadline:
            if self.server_process.poll() is not None:
                logger.error("❌ Server exited during startup")
                return False
            try:
                health = requests.get(f"{self.base_url}/health", timeout=2).json()
                if all(health.get("managers", {}).values()):
                    logger.info("✅ Server is ready")
                    return True
            except requests.RequestException as e:
                logger.debug(f"Server not answering yet: {e}")
            time.sleep(0.5)

        logger.error(f"❌ Server not ready after {timeout:.0f}s")
        return False

    # ==================== CONSOLE COMMANDS ====================

    def show_status(self):
        try:
            data = requests.get(f"{self.base_url}/status", timeout=5).json()
        except requests.RequestException as e:
            print(f"❌ Status check failed: {e}")
            return

        print("\n📊 Status")
        for key in ("cache", "firebase", "gemini", "responses_proxy"):
            print(f"   {key:<16} {data.get(key)}")
        cached = (data.get("skill_tree") or {}).get("cachedLevels") or []
        print(f"   {'skill tree':<16} {', '.join(cached) or 'nothing cached'}")
        print(f"   {'sessions':<16} {data.get('connections', {}).get('total_active_connections', 0)}")
        for issue in data.get("config_issues") or []:
            print(f"   ⚠️ {issue}")

    def show_level(self, level: str):
        response = requests.get(f"{self.base_url}/api/skill-tree/{level}", timeout=10)
        if response.status_code != 200:
            print(f"❌ {response.json().get('error') or response.status_code}")
            return

        for unit in response.json()["units"]:
            title = unit.get("title", {})
            name = title.get("en") if isinstance(title, dict) else title
            print(f"\n📘 {unit['id']} {name} ({unit.get('subLevel', '')}, {unit['totalXp']} XP)")
            for lesson in unit.get("lessons", []):
                print(f"   - {lesson['id']:<40} needs {lesson.get('xpRequired', 0):>4} XP  {'/'.join(lesson.get('modes', []))}")

    def generate_exercise(self, kind: str):
        """Print the NDJSON lines of one generated exercise as they arrive"""
        with requests.post(f"{self.base_url}/api/exercises/generate", json={"kind": kind},
                           stream=True, timeout=120) as response:
            if response.status_code != 200:
                print(f"❌ {response.status_code}: {response.text}")
                return
            for line in response.iter_lines(decode_unicode=True):
                if not line:
                    continue
                event = json.loads(line)
                if event["type"] == "phase":
                    print(f"   ⏳ {event['phase']}: {json.dumps(event['data'], ensure_ascii=False)}")
                elif event["type"] == "exercise":
                    exercise = event["exercise"]
                    print(f"   ✅ {exercise['id']} ({exercise['source']})")
                    print(json.dumps(exercise, ensure_ascii=False, indent=2))
                elif event["type"] == "error":
                    print(f"   ❌ {event['message']}")

    def run_client(self, interactive: bool):
        from testing.stream_client import ExerciseStreamClient

        client = ExerciseStreamClient(SMOKE_NPUB, host=f"localhost:{self.port}")
        try:
            asyncio.run(client.run_test(interactive=interactive))
        except KeyboardInterrupt:
            logger.info("Smoke client stopped")

    def show_help(self):
        print("\n" + "=" * 60)
        print(f"🎯 Nosabos server at {self.base_url}  (docs: {self.base_url}/docs)")
        print("=" * 60)
        print("   g <kind>   generate an exercise (fill, mc, ma, speak, match, translate, repeat)")
        print("   k <level>  list a skill tree level (A1..C2)")
        print("   t / i      automated / interactive WebSocket session")
        print("   s          status")
        print("   h          help")
        print("   q          quit")

    def console(self):
        self.show_help()
        while self.running:
            try:
                command, _, arg = input("\n> ").strip().partition(" ")
            except (EOFError, KeyboardInterrupt):
                break

            command = command.lower()
            try:
                if command == 'q':
                    break
                elif command == 'g':
                    self.generate_exercise(arg.strip() or "mc")
                elif command == 'k':
                    self.show_level(arg.strip() or "A1")
                elif command in ('t', 'i'):
                    self.run_client(interactive=command == 'i')
                elif command == 's':
                    self.show_status()
                elif command == 'h':
                    self.show_help()
                elif command:
                    print("Unknown command. Type 'h' for help.")
            except requests.RequestException as e:
                logger.error(f"Request failed: {e}")

    def stop_server(self):
        if not self.server_process or self.server_process.poll() is not None:
            return
        self.server_process.terminate()
        try:
            self.server_process.wait(timeout=5)
            logger.info("✅ Server stopped")
        except subprocess.TimeoutExpired:
            self.server_process.kill()
            logger.info("🔪 Server killed")

    def run(self, mode: str = "console") -> bool:
        if not (self.check_dependencies() and self.check_configuration()):
            return False

        try:
            if not self.start_server():
                return False

            self.running = True
            if mode == "console":
                self.console()
            else:
                self.run_client(interactive=mode == "interactive")
            return True
        finally:
            self.running = False
            self.stop_server()


USAGE = """Usage:
  python run.py              start the server and open the console
  python run.py test         start the server and run the automated WebSocket session
  python run.py interactive  start the server and run the interactive client
"""


def main():
    modes = {"test": "test", "interactive": "interactive"}
    arg = sys.argv[1].lower() if len(sys.argv) > 1 else ""
    if arg and arg not in modes:
        print(USAGE)
        return

    launcher = ServerLauncher()

    def on_signal(signum, frame):
        logger.info("Received interrupt signal")
        launcher.running = False
        launcher.stop_server()
        sys.exit(0)

    signal.signal(signal.SIGINT, on_signal)
    signal.signal(signal.SIGTERM, on_signal)

    if not launcher.run(modes.get(arg, "console")):
        sys.exit(1)


if __name__ == "__main__":
    main()
