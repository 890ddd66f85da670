"""
Publisher App - Transaction Files to Queue

Responsibilities:
- Scheduled scan of the inbox directory (cron via APScheduler)
- Parse transaction CSV files and validate each row
- Publish valid rows to the SQS transactions queue as JSON events
- Store rejected rows in the rejected-transactions S3 bucket
- Archive files once every row was handled

Outputs:
- SQS messages: TransactionEvent JSON (camelCase)
- s3://{S3_REJECTED_BUCKET_NAME}/rejected/{file}/{file}_{line_number}.json
"""
