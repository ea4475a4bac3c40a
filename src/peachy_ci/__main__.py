from peachy_ci.cli import app

app(prog_name="peachy-ci")
