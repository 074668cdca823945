import sys

from scripts.run_dashboard import main


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n🛑 Dashboard interrupted by user.")
        sys.exit(0)
    except Exception as e:
        print(f"\n🔥 Fatal System Error: {e}")
        sys.exit(1)
