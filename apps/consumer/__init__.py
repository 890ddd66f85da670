"""
Consumer App - Transaction Enrichment and Storage

Responsibilities:
- Listen on the SQS transactions queue
- Deserialize each message into a TransactionEvent
- Enrich the event (status=PROCESSED, originalSource=SQS-Consumer)
- Store the enriched event as JSON in S3 under a date-partitioned key
- Leave failed messages on the queue so SQS redelivers them

Output:
- s3://{S3_OUTPUT_BUCKET_NAME}/processed-transactions/{yyyy}/{MM}/{dd}/{transactionId}.json
"""
