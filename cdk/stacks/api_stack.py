from aws_cdk import (
    Stack,
    Duration,
    RemovalPolicy,
    CfnOutput,
    aws_apigateway as apigw,
    aws_lambda as _lambda,
    aws_ec2 as ec2,
    aws_rds as rds,
    aws_logs as logs,
    aws_xray as xray,
)
from constructs import Construct

class ApiStack(Stack):
    def __init__(self, scope: Construct, construct_id: str,
                 database_name: str = "contact",
                 allowed_statuses: str = "",
                 enable_xray: bool = True,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Database stays off the internet; the function reaches it over the Data API
        vpc = ec2.Vpc(self, "Vpc",
                      max_azs=2,
                      nat_gateways=0,
                      subnet_configuration=[ec2.SubnetConfiguration(
                          name="db",
                          subnet_type=ec2.SubnetType.PRIVATE_ISOLATED,
                          cidr_mask=24)])

        cluster = rds.DatabaseCluster(self, "ContactDb",
                                      engine=rds.DatabaseClusterEngine.aurora_postgres(
                                          version=rds.AuroraPostgresEngineVersion.VER_16_1),
                                      writer=rds.ClusterInstance.serverless_v2("writer"),
                                      serverless_v2_min_capacity=0.5,
                                      serverless_v2_max_capacity=2,
                                      vpc=vpc,
                                      vpc_subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_ISOLATED),
                                      default_database_name=database_name,
                                      credentials=rds.Credentials.from_generated_secret("contact_admin"),
                                      enable_data_api=True,
                                      storage_encrypted=True,
                                      removal_policy=RemovalPolicy.SNAPSHOT)

        contact_fn = _lambda.Function(self, "ContactFn",
                                      runtime=_lambda.Runtime.PYTHON_3_12,
                                      handler="contact.handler",
                                      code=_lambda.Code.from_asset("../functions"),
                                      environment={
                                          "CLUSTER_ARN": cluster.cluster_arn,
                                          "SECRET_ARN": cluster.secret.secret_arn,
                                          "DATABASE_NAME": database_name,
                                          "ALLOWED_STATUSES": allowed_statuses,
                                          "LOG_LEVEL": "INFO",
                                      },
                                      timeout=Duration.seconds(10),
                                      tracing=_lambda.Tracing.ACTIVE if enable_xray else _lambda.Tracing.DISABLED,
                                      log_retention=logs.RetentionDays.TWO_WEEKS)

        cluster.grant_data_api_access(contact_fn)

        # API Gateway; every method goes to the function so it can answer OPTIONS and 404s itself
        api = apigw.RestApi(self, "HttpApi",
                            deploy_options=apigw.StageOptions(metrics_enabled=True, logging_level=apigw.MethodLoggingLevel.INFO, tracing_enabled=enable_xray),
                            cloud_watch_role=True)

        contact_integration = apigw.LambdaIntegration(contact_fn, proxy=True)

        # /api/contact and /api/contact/{proxy+}
        contact = api.root.add_resource("api").add_resource("contact")
        contact.add_method("ANY", contact_integration)
        contact.add_proxy(default_integration=contact_integration, any_method=True)

        if enable_xray:
            xray.CfnSamplingRule(self, "DefaultSampling",
                                 sampling_rule=xray.CfnSamplingRule.SamplingRuleProperty(
                                     rule_name="ContactDefault",
                                     resource_arn="*",
                                     priority=10000,
                                     fixed_rate=0.1,
                                     reservoir_size=1,
                                     service_name="*",
                                     service_type="*",
                                     host="*",
                                     http_method="*",
                                     url_path="*",
                                     version=1))

        self.api_execute_url = f"{api.url}"
        self.cluster_arn = cluster.cluster_arn

        CfnOutput(self, "ApiUrl", value=api.url)
        CfnOutput(self, "ClusterArn", value=cluster.cluster_arn)
        CfnOutput(self, "SecretArn", value=cluster.secret.secret_arn)
