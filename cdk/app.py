#!/usr/bin/env python3
import os
import aws_cdk as cdk
from stacks.api_stack import ApiStack

app = cdk.App()

env = cdk.Environment(
    account=os.getenv("CDK_DEFAULT_ACCOUNT"),
    region=os.getenv("CDK_DEFAULT_REGION", "us-east-1")
)

database_name = app.node.try_get_context("database_name") or "contact"
allowed_statuses = app.node.try_get_context("allowed_statuses") or ""
enable_xray = str(app.node.try_get_context("enable_xray") or "true").lower() == "true"

# Lambda + API GW + Aurora Serverless (Data API); schema.sql is applied out of band
api = ApiStack(app, "ContactApiStack",
               env=env,
               database_name=database_name,
               allowed_statuses=allowed_statuses,
               enable_xray=enable_xray)

app.synth()
