# Services package init
"""
Student Records — Services Layer
==================================

Service Inventory:
    - StudentService: store operations for student records and translation
      of SQLAlchemy failures into application exceptions
"""
