from .abstract import AWS_ERRORS, Manager, Model, error_code


# ----------------------------------------
# Managers
# ----------------------------------------


class CertificateManager(Manager):

    service = 'acm'

    def get(self, pk: str, **_) -> "Certificate":
        try:
            response = self.client.describe_certificate(CertificateArn=pk)
        except AWS_ERRORS as e:
            code = error_code(e)
            if code == 'ResourceNotFoundException':
                raise Certificate.DoesNotExist(f'Certificate("{pk}") does not exist in AWS: {e}')
            if code == 'InvalidArnException':
                raise Certificate.InvalidReference(f'"{pk}" is not a valid certificate ARN: {e}')
            raise Certificate.LookupFailed(f'Could not describe certificate {pk}: {e}')
        return Certificate(response['Certificate'])


# ----------------------------------------
# Models
# ----------------------------------------


class Certificate(Model):

    objects = CertificateManager()

    class InvalidReference(Model.LookupFailed):
        """
        The certificate ARN is malformed.
        """
        pass

    # ---------------------
    # Model overrides
    # ---------------------

    @property
    def pk(self) -> str:
        return self.arn

    @property
    def name(self) -> str:
        return self.domain_name

    @property
    def arn(self) -> str:
        return self.data['CertificateArn']

    # ----------------------------------------
    # Certificate-specific properties
    # ----------------------------------------

    @property
    def domain_name(self) -> str:
        return self.data.get('DomainName', '')
