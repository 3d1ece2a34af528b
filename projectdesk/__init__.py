"""ProjectDesk: mini-program login and team project backend."""
