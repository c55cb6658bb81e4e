"""Run the OHB REST service: ``python -m ohb``."""

from ohb.api.rest.app import run_server

if __name__ == "__main__":
    run_server()
