"""Allow `python -m student_records` to start the server."""

from student_records.main import run

run()
