"""
Environment setup for the trafficlight agent.
Run: python scripts/setup_env.py
"""

import shutil
import subprocess
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parent.parent


def run_command(command, description):
    """Run a command from the repository root and report the outcome."""
    print(f"\n{description}...")
    try:
        result = subprocess.run(command, cwd=ROOT, check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as e:
        print(f"❌ {description} failed:")
        print(e.stderr)
        return False
    print(f"✅ {description} completed successfully")
    if result.stdout:
        print(result.stdout)
    return True


def main():
    print("=" * 60)
    print("Trafficlight Agent Setup")
    print("=" * 60)

    if sys.version_info < (3, 10):
        print("❌ Python 3.10+ is required")
        print(f"   Current version: {sys.version_info.major}.{sys.version_info.minor}")
        return 1
    print(f"✅ Python version: {sys.version.split()[0]}")

    if not run_command([sys.executable, "-m", "pip", "install", "-e", ".[test]"], "Installing the agent"):
        print("\n⚠️  Failed to install. Please run manually:")
        print("   pip install -e .[test]")
        return 1

    if not run_command([sys.executable, "-m", "playwright", "install", "chromium"], "Installing Playwright browsers"):
        print("\n⚠️  Failed to install Playwright browsers. Please run manually:")
        print("   playwright install chromium")
        return 1

    env_file = ROOT / ".env"
    example_file = ROOT / ".env.example"
    if env_file.exists():
        print("✅ .env file exists")
    elif example_file.exists():
        shutil.copyfile(example_file, env_file)
        print("✅ Created .env from .env.example. Edit TRAFFICLIGHT_URL and ELEMENT_WEB_URL if needed")
    else:
        print("⚠️  .env.example not found; defaults will be used")

    print("\n" + "=" * 60)
    print("Setup complete!")
    print("=" * 60)
    print("\nNext steps:")
    print("1. Start the trafficlight server and element-web")
    print("2. Run the agent: trafficlight-agent once")
    print("")
    return 0


if __name__ == "__main__":
    sys.exit(main())
