"""
TutorLedger Backend: API Routes Package
========================================

Route Inventory:
    - tutors.py:         POST/GET /api/tutors
    - students.py:       POST/GET /api/students, POST /api/students/suggest-tutors
    - class_records.py:  /api/class-records (submit, late-submission, list,
                         pending, approve, update, delete, bulk-delete)
    - admin.py:          /api/admin (exports, late-approve, action logs, tutors)
    - health.py:         GET /health

Routes stay thin: parse the request, call one service method, shape the
response. Business-rule failures propagate as TutorLedgerError subclasses
and are rendered by the handlers in main.py.
"""
