"""Stream the CloudWatch logs of the Lambda functions in a CloudFormation stack."""
