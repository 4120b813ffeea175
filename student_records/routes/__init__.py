# Routes package init
"""
Student Records — API Routes Package
======================================

Route Inventory:
    - students.py:  POST/GET /students, GET/PUT/DELETE /students/{student_id}
    - health.py:    GET /health

Routes stay thin: extract request data, call the service, wrap the result.
"""
