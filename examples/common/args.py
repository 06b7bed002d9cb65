import argparse


def get_args(description, epilog=""):
    parser = argparse.ArgumentParser(description=description, epilog=epilog)
    parser.add_argument("-s", "--servers", nargs='*',
                        default=["nats://localhost:4222"],
                        help="List of servers to connect. "
                        "This option is default set to nats://localhost:4222 "
                        "which mean that, by default, you should run your "
                        "own server locally"
    )
    parser.add_argument("-c", "--config",
                        help="JSON file with the connection configuration, "
                        "using the same keys as the plugin schema "
                        "(servers, authenticator, tlsEnabled, tlsConfig...). "
                        "Overrides --servers when given."
    )
    parser.add_argument("--debug", action="store_true",
                        help="Log every status event of the connection.")
    return parser.parse_known_args()
