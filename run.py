"""Development entry point."""

from turf_exporter.runner import main

if __name__ == "__main__":
    main()
