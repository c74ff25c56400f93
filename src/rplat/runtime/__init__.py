"""Runtime components: state, lifecycle dispatch, client-info watch, readiness."""
