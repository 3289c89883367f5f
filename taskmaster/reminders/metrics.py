from prometheus_client import Counter


scans_total = Counter(
    "reminder_scans_total",
    "Total reminder scan cycles",
    ["kind"],
)

scan_failures_total = Counter(
    "reminder_scan_failures_total",
    "Scan cycles that raised",
    ["kind"],
)

candidates_skipped_total = Counter(
    "reminder_candidates_skipped_total",
    "Candidates returned by the window query but not reminded",
    ["kind", "reason"],
)

emails_sent_total = Counter(
    "reminder_emails_sent_total",
    "Total reminder emails accepted by SendGrid",
    ["kind"],
)

emails_failed_total = Counter(
    "reminder_emails_failed_total",
    "Total reminder emails rejected or not delivered",
    ["kind"],
)

notifications_created_total = Counter(
    "reminder_notifications_created_total",
    "Total in-app notifications written",
    ["kind"],
)
