"""
TutorLedger Backend: Services Layer
====================================

Business rules between the routes (HTTP) and the RecordStore (persistence).

Service Inventory:
    - rates:            rate table, payment calculator, currency display
    - validation:       class record rules, interval and date parsing
    - workflow:         record status transitions and audit entries
    - reports:          by-tutor / by-student / monthly aggregation
    - csv_renderer:     ReportTable → CSV text
    - registry_service: tutor and student registration
    - record_service:   submission, approval, update, deletion
    - export_service:   query → aggregate → CSV for the admin exports

The pure modules (rates, validation, workflow, reports, csv_renderer) never
touch the database and are unit-tested directly.
"""
