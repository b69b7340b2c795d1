from ats_tracking.cli.app import app

app()
